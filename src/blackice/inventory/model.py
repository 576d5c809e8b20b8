"""Records read from the key-pair / instance inventory and the scan result."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class KeyPairRecord:
    name: str
    fingerprint: str

    def to_dict(self) -> Dict[str, Any]:
        return {"Name": self.name, "Fingerprint": self.fingerprint}


@dataclass(frozen=True)
class InstanceRecord:
    instance_id: str
    private_ip_address: str = ""
    # remaining gateway fields, passed through untouched
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def projected(self) -> "InstanceRecord":
        return InstanceRecord(self.instance_id, self.private_ip_address)

    def to_dict(self, full: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if full:
            out.update(self.attributes)
        out["Id"] = self.instance_id
        out["PrivateIPAddress"] = self.private_ip_address
        return out


@dataclass(frozen=True)
class InstanceFilter:
    field: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class InstancePage:
    instances: List[InstanceRecord]
    next_token: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    key_pair: KeyPairRecord
    allowed_instances: Tuple[InstanceRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "KeyName": self.key_pair.name,
            "AllowedInstances": [i.to_dict() for i in self.allowed_instances],
        }
