"""Caller-facing operations shared by the HTTP app and the CLI.

Each function returns plain JSON-ready data; errors from the taxonomy in
:mod:`blackice.errors` propagate to the caller untouched.
"""
from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .crypto.fingerprint import FingerprintEngine
from .errors import BlackIceError, EncodingError, IdentityNotFoundError
from .inventory.resolver import IdentityResolver
from .obs.metrics import FINGERPRINTS, LISTINGS, SCANS, SCAN_INSTANCES


def _counted_derive(derive, source) -> str:
    try:
        fp = derive(source)
    except BlackIceError as e:
        FINGERPRINTS.labels(result=e.code).inc()
        raise
    FINGERPRINTS.labels(result="ok").inc()
    return fp


def derive_fingerprint(pem_bytes: Union[bytes, str], engine: Optional[FingerprintEngine] = None) -> str:
    return _counted_derive((engine or FingerprintEngine()).derive, pem_bytes)


def derive_fingerprint_file(path: Union[str, Path], engine: Optional[FingerprintEngine] = None) -> str:
    return _counted_derive((engine or FingerprintEngine()).derive_from_file, path)


def scan(resolver: IdentityResolver, identity_pem: Union[bytes, str]) -> Dict[str, Any]:
    try:
        result = resolver.scan(identity_pem)
    except IdentityNotFoundError:
        SCANS.labels(result="not_found").inc()
        raise
    except BlackIceError:
        SCANS.labels(result="error").inc()
        raise
    SCANS.labels(result="allowed").inc()
    SCAN_INSTANCES.observe(len(result.allowed_instances))
    return result.to_dict()


def list_key_pairs(resolver: IdentityResolver) -> List[Dict[str, Any]]:
    LISTINGS.labels(operation="list_key_pairs").inc()
    return [kp.to_dict() for kp in resolver.list_key_pairs()]


def list_instances(resolver: IdentityResolver, key_name: str) -> List[Dict[str, Any]]:
    LISTINGS.labels(operation="list_instances").inc()
    return [i.to_dict(full=True) for i in resolver.list_instances(key_name)]


def _json_default(o: Any):
    if isinstance(o, (datetime.datetime, datetime.date)):
        return o.isoformat()
    raise TypeError(f"{type(o).__name__} is not JSON serializable")


def render_json(payload: Any, indent: Optional[int] = None) -> str:
    try:
        return json.dumps(payload, default=_json_default, indent=indent)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"failed to render response: {e}") from e
