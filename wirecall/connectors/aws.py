# SPDX-License-Identifier: Apache-2.0
"""AWS actions: the JSON protocol family (KMS, Systems Manager, DynamoDB) and S3 buckets."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Optional, TypeVar
from xml.etree import ElementTree

from wirecall.actions.base import Action
from wirecall.actions.dispatcher import DispatcherConfig
from wirecall.auth import AwsSigV4Auth
from wirecall.auth.base import CredentialsProvider
from wirecall.auth.credentials import env_aws
from wirecall.auth.sigv4 import Clock, utc_now
from wirecall.classifier import decode_with, no_content
from wirecall.messages import WireRequest, WireResponse
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import Codec, JsonCodec
from wirecall.transport import Transport

R = TypeVar("R")


def _pascal(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


class AwsJsonAction(Action[R]):
    """POST ``/`` with ``X-Amz-Target: <target_prefix>.<operation>``.

    Subclasses are dataclasses whose snake_case fields map to the PascalCase
    members of the request document; ``None`` fields are omitted.
    """

    target_prefix: ClassVar[str]
    json_version: ClassVar[str] = "1.1"
    response_codec: ClassVar[Codec]

    @property
    def operation(self) -> str:
        return type(self).__name__

    def to_json(self) -> Dict[str, Any]:
        return {
            _pascal(f.name): getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if getattr(self, f.name) is not None
        }

    def build_request(self) -> WireRequest:
        codec = JsonCodec(content_type=f"application/x-amz-json-{self.json_version}")
        return WireRequest.of(
            "POST",
            "/",
            {"X-Amz-Target": f"{self.target_prefix}.{self.operation}", "Content-Type": codec.content_type},
            codec.encode(self.to_json()),
        )

    def decode_response(self, response: WireResponse) -> Result[R, RemoteFailure]:
        return decode_with(self.response_codec, "POST", "/", response)


# KMS


@dataclass(frozen=True, slots=True)
class KeyList:
    key_ids: List[str]
    truncated: bool
    next_marker: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "KeyList":
        return cls(
            key_ids=[entry["KeyId"] for entry in data["Keys"]],
            truncated=bool(data.get("Truncated", False)),
            next_marker=data.get("NextMarker"),
        )


@dataclass(frozen=True, slots=True)
class KeyMetadata:
    key_id: str
    arn: str
    enabled: bool
    key_state: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "KeyMetadata":
        meta = data["KeyMetadata"]
        return cls(key_id=meta["KeyId"], arn=meta["Arn"], enabled=bool(meta["Enabled"]), key_state=meta["KeyState"])


class KMSAction(AwsJsonAction[R]):
    target_prefix = "TrentService"


@dataclass(frozen=True)
class ListKeys(KMSAction[KeyList]):
    limit: Optional[int] = None
    marker: Optional[str] = None
    response_codec = JsonCodec(KeyList.from_json)


@dataclass(frozen=True)
class DescribeKey(KMSAction[KeyMetadata]):
    key_id: str
    response_codec = JsonCodec(KeyMetadata.from_json)


# Systems Manager


@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    value: str
    type: str
    version: int

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Parameter":
        param = data["Parameter"]
        return cls(name=param["Name"], value=param["Value"], type=param["Type"], version=int(param["Version"]))


class SystemsManagerAction(AwsJsonAction[R]):
    target_prefix = "AmazonSSM"


@dataclass(frozen=True)
class GetParameter(SystemsManagerAction[Parameter]):
    name: str
    with_decryption: Optional[bool] = None
    response_codec = JsonCodec(Parameter.from_json)


@dataclass(frozen=True)
class PutParameter(SystemsManagerAction[int]):
    """Returns the new parameter version."""

    name: str
    value: str
    type: str = "String"
    overwrite: Optional[bool] = None
    response_codec = JsonCodec(lambda data: int(data["Version"]))


@dataclass(frozen=True)
class DeleteParameter(SystemsManagerAction[None]):
    name: str

    def decode_response(self, response: WireResponse) -> Result[None, RemoteFailure]:
        return no_content("POST", "/", response)


# DynamoDB


class DynamoDbAction(AwsJsonAction[R]):
    target_prefix = "DynamoDB_20120810"
    json_version = "1.0"


@dataclass(frozen=True)
class UpdateItem(DynamoDbAction[Dict[str, Any]]):
    """Returns the ``Attributes`` member, empty unless ``return_values`` asks for them."""

    table_name: str
    key: Dict[str, Any]
    condition_expression: Optional[str] = None
    update_expression: Optional[str] = None
    expression_attribute_names: Optional[Dict[str, str]] = None
    expression_attribute_values: Optional[Dict[str, Any]] = None
    return_consumed_capacity: Optional[str] = None
    return_item_collection_metrics: Optional[str] = None
    return_values: Optional[str] = None
    response_codec = JsonCodec(lambda data: dict(data.get("Attributes") or {}))


# S3


@dataclass(frozen=True)
class CreateBucket(Action[None]):
    bucket: str
    region: str

    @property
    def target(self) -> str:
        return f"/{self.bucket}"

    def build_request(self) -> WireRequest:
        if self.region == "us-east-1":
            return WireRequest.of("PUT", self.target)
        root = ElementTree.Element(
            "CreateBucketConfiguration", xmlns="http://s3.amazonaws.com/doc/2006-03-01/"
        )
        ElementTree.SubElement(root, "LocationConstraint").text = self.region
        body = ElementTree.tostring(root, encoding="utf-8", xml_declaration=False)
        return WireRequest.of("PUT", self.target, {"Content-Type": "application/xml"}, body)

    def decode_response(self, response: WireResponse) -> Result[None, RemoteFailure]:
        return no_content("PUT", self.target, response)


@dataclass(frozen=True)
class DeleteBucket(Action[None]):
    bucket: str

    @property
    def target(self) -> str:
        return f"/{self.bucket}"

    def build_request(self) -> WireRequest:
        return WireRequest.of("DELETE", self.target)

    def decode_response(self, response: WireResponse) -> Result[None, RemoteFailure]:
        return no_content("DELETE", self.target, response)


def aws_config(
    service: str,
    region: str,
    transport: Transport,
    *,
    credentials: Optional[CredentialsProvider] = None,
    clock: Clock = utc_now,
    base_url: Optional[str] = None,
) -> DispatcherConfig:
    return DispatcherConfig(
        transport=transport,
        auth=AwsSigV4Auth(credentials or env_aws(service, region), clock=clock),
        base_url=base_url or f"https://{service}.{region}.amazonaws.com",
        codec=JsonCodec(content_type="application/x-amz-json-1.1"),
        name=service,
    )
