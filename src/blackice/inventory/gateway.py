from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import GatewayError
from ..utils.logging import get_logger
from .model import InstanceFilter, InstancePage, InstanceRecord, KeyPairRecord

log = get_logger(__name__)


@runtime_checkable
class InventoryGateway(Protocol):
    """Read access to the key-pair registry and the instance directory.

    ``list_instances`` returns one page at a time; a page whose ``next_token``
    is ``None`` is the last one. Implementations raise :class:`GatewayError`
    for any transport, auth or API failure.
    """

    def list_key_pairs(self) -> Sequence[KeyPairRecord]: ...

    def list_instances(self, instance_filter: InstanceFilter, next_token: Optional[str] = None) -> InstancePage: ...


def _wrap(operation: str, exc: Exception) -> GatewayError:
    aws_code = None
    if isinstance(exc, ClientError):
        aws_code = exc.response.get("Error", {}).get("Code")
    log.warning("ec2 %s failed: %s", operation, exc)
    return GatewayError(operation, str(exc), aws_code=aws_code)


def _instance_record(raw: Dict[str, Any]) -> InstanceRecord:
    attrs = {k: v for k, v in raw.items() if k not in ("InstanceId", "PrivateIpAddress")}
    return InstanceRecord(
        instance_id=raw.get("InstanceId", ""),
        private_ip_address=raw.get("PrivateIpAddress", ""),
        attributes=attrs,
    )


class Ec2Gateway:
    """EC2-backed inventory. Credentials and region come from the boto3 session
    (env vars, ~/.aws/config, instance profile) unless a client is injected."""

    def __init__(self, region_name: Optional[str] = None, profile_name: Optional[str] = None, client=None):
        if client is None:
            try:
                session = boto3.session.Session(profile_name=profile_name, region_name=region_name)
                client = session.client("ec2")
            except BotoCoreError as e:
                raise _wrap("CreateClient", e) from e
        self.client = client

    def list_key_pairs(self) -> List[KeyPairRecord]:
        log.debug("ec2 DescribeKeyPairs")
        try:
            resp = self.client.describe_key_pairs()
        except (ClientError, BotoCoreError) as e:
            raise _wrap("DescribeKeyPairs", e) from e
        return [
            KeyPairRecord(name=kp.get("KeyName", ""), fingerprint=kp.get("KeyFingerprint", ""))
            for kp in resp.get("KeyPairs", [])
        ]

    def list_instances(self, instance_filter: InstanceFilter, next_token: Optional[str] = None) -> InstancePage:
        params: Dict[str, Any] = {
            "Filters": [{"Name": instance_filter.field, "Values": list(instance_filter.values)}],
        }
        if next_token:
            params["NextToken"] = next_token
        log.debug("ec2 DescribeInstances filter=%s=%s token=%s", instance_filter.field, ",".join(instance_filter.values), bool(next_token))
        try:
            resp = self.client.describe_instances(**params)
        except (ClientError, BotoCoreError) as e:
            raise _wrap("DescribeInstances", e) from e
        instances = [
            _instance_record(inst)
            for reservation in resp.get("Reservations", [])
            for inst in reservation.get("Instances", [])
        ]
        return InstancePage(instances=instances, next_token=resp.get("NextToken") or None)


__all__ = ["InventoryGateway", "Ec2Gateway"]
