import logging

from blackice.utils.logging import _level


def test_level_names():
    assert _level("debug") == logging.DEBUG
    assert _level("WARNING") == logging.WARNING


def test_unknown_level_falls_back_to_info():
    assert _level("verbose") == logging.INFO
