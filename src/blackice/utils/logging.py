import logging
import sys

from ..config import load_settings


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    # getLevelName echoes "Level X" back for unknown names
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "blackice"):
    logger = logging.getLogger(name)
    root = logging.getLogger("blackice")
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s %(message)s")
        h.setFormatter(fmt)
        root.addHandler(h)
        root.setLevel(_level(load_settings().log_level))
    return logger
