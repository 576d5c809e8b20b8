"""Registry-compatible private key fingerprints.

EC2 reports the fingerprint of a key pair it generated as the SHA-1 of the
private key's PKCS#8 DER, rendered ``aa:bb:...``. Callers usually hold the key
as a PKCS#1 ``RSA PRIVATE KEY`` (or SEC1 ``EC PRIVATE KEY``) PEM, so the key is
re-encoded with :func:`marshal_pkcs8_private_key` before hashing.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import re
from pathlib import Path
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from ..errors import MalformedKeyError, UnsupportedAlgorithmError
from .pkcs8 import DEFAULT_OIDS, AlgorithmOids, marshal_pkcs8_private_key

PEM_BLOCK_RE = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----\s*(.*?)\s*-----END \1-----",
    re.DOTALL,
)


def pem_to_der(pem_bytes: Union[bytes, str]) -> bytes:
    """Return the DER body of the first decodable PEM block."""
    if isinstance(pem_bytes, str):
        pem_bytes = pem_bytes.encode()
    for m in PEM_BLOCK_RE.finditer(pem_bytes):
        body = b"".join(m.group(2).split())
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            continue
    raise MalformedKeyError("no PEM block found")


def load_private_key(pem_bytes: Union[bytes, str]):
    der = pem_to_der(pem_bytes)
    try:
        return serialization.load_der_private_key(der, password=None)
    except UnsupportedAlgorithm as e:
        raise UnsupportedAlgorithmError(str(e)) from e
    except (ValueError, TypeError) as e:
        # TypeError: encrypted key, no password supplied
        raise MalformedKeyError(f"failed to parse private key: {e}") from e


def format_fingerprint(digest: bytes) -> str:
    return ":".join(f"{b:02x}" for b in digest)


class FingerprintEngine:
    """Stateless PEM -> fingerprint transformation.

    The algorithm identifiers written into the PKCS#8 container are fixed per
    engine instance; the default set matches what EC2 computes.
    """

    def __init__(self, oids: AlgorithmOids = DEFAULT_OIDS):
        self.oids = oids

    def derive(self, pem_bytes: Union[bytes, str]) -> str:
        key = load_private_key(pem_bytes)
        der = marshal_pkcs8_private_key(key, self.oids)
        return format_fingerprint(hashlib.sha1(der).digest())

    def derive_from_file(self, path: Union[str, Path]) -> str:
        return self.derive(Path(path).read_bytes())


__all__ = [
    "FingerprintEngine",
    "format_fingerprint",
    "load_private_key",
    "pem_to_der",
]
