"""Identity -> allow-list resolution.

scan: derive fingerprint -> list key pairs -> first exact match -> every
instance launched with that key pair (all pages) -> ScanResult.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from ..crypto.fingerprint import FingerprintEngine
from ..errors import IdentityNotFoundError
from .gateway import InventoryGateway
from .model import InstanceFilter, InstanceRecord, KeyPairRecord, ScanResult

KEY_NAME_FILTER = "key-name"


class IdentityResolver:
    def __init__(self, gateway: InventoryGateway, engine: Optional[FingerprintEngine] = None):
        self.gateway = gateway
        self.engine = engine or FingerprintEngine()

    def scan(self, identity_pem: Union[bytes, str]) -> ScanResult:
        fp = self.engine.derive(identity_pem)
        match = self.match_key_pair(fp, self.gateway.list_key_pairs())
        if match is None:
            raise IdentityNotFoundError(fp)
        instances = self.list_instances_by_filter(KEY_NAME_FILTER, match.name)
        return ScanResult(
            key_pair=match,
            allowed_instances=tuple(i.projected() for i in instances),
        )

    @staticmethod
    def match_key_pair(fingerprint: str, key_pairs: Iterable[KeyPairRecord]) -> Optional[KeyPairRecord]:
        for kp in key_pairs:
            if kp.fingerprint == fingerprint:
                return kp
        return None

    def list_key_pairs(self) -> List[KeyPairRecord]:
        return list(self.gateway.list_key_pairs())

    def list_instances_by_filter(self, filter_key: str, filter_value: str) -> List[InstanceRecord]:
        instance_filter = InstanceFilter(filter_key, (filter_value,))
        result: List[InstanceRecord] = []
        token: Optional[str] = None
        while True:
            page = self.gateway.list_instances(instance_filter, next_token=token)
            result.extend(page.instances)
            if page.next_token is None:
                return result
            token = page.next_token

    def list_instances(self, key_name: str) -> List[InstanceRecord]:
        return self.list_instances_by_filter(KEY_NAME_FILTER, key_name)
