"""Error taxonomy shared by the fingerprint engine, the resolver and the HTTP layer.

Each error carries the HTTP status and short code the boundary reports for it.
"""
from __future__ import annotations

from typing import Optional


class BlackIceError(Exception):
    status_code = 500
    code = "internal_error"


class MalformedKeyError(BlackIceError):
    """PEM envelope or DER body could not be decoded as a private key."""

    status_code = 400
    code = "malformed_key"


class UnsupportedAlgorithmError(BlackIceError):
    """Key parsed fine but is neither RSA nor ECDSA."""

    status_code = 400
    code = "unsupported_algorithm"


class EncodingError(BlackIceError):
    """PKCS#8 re-encoding or JSON rendering failed."""

    status_code = 422
    code = "encoding_error"


class IdentityNotFoundError(BlackIceError):
    """No registered key pair carries the derived fingerprint."""

    status_code = 404
    code = "identity_not_found"

    def __init__(self, fingerprint: str):
        super().__init__(f"no key pair registered with fingerprint {fingerprint}")
        self.fingerprint = fingerprint


class GatewayError(BlackIceError):
    """Inventory call failed. The upstream exception is kept as __cause__."""

    status_code = 502
    code = "gateway_error"

    def __init__(self, operation: str, message: str, aws_code: Optional[str] = None):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.aws_code = aws_code


__all__ = [
    "BlackIceError",
    "MalformedKeyError",
    "UnsupportedAlgorithmError",
    "EncodingError",
    "IdentityNotFoundError",
    "GatewayError",
]
