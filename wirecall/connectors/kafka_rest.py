"""Kafka REST proxy (v2) actions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from wirecall.actions.base import Action
from wirecall.actions.dispatcher import DispatcherConfig
from wirecall.auth import BasicAuth
from wirecall.auth.base import CredentialsProvider
from wirecall.auth.credentials import env_basic
from wirecall.classifier import decode_with, no_content
from wirecall.messages import WireRequest, WireResponse
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import JsonCodec
from wirecall.transport import Transport

ACCEPT = "application/vnd.kafka.v2+json"
JSON_RECORDS = "application/vnd.kafka.json.v2+json"

# The proxy answers some calls with an empty 200 where an empty object is meant.
EMPTY_OBJECT = b"{}"


@dataclass(frozen=True, slots=True)
class Record:
    value: Any
    key: Any = None
    partition: Optional[int] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"value": self.value}
        if self.key is not None:
            data["key"] = self.key
        if self.partition is not None:
            data["partition"] = self.partition
        return data


@dataclass(frozen=True, slots=True)
class PartitionOffset:
    partition: Optional[int]
    offset: Optional[int]
    error_code: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ConsumerInstance:
    instance_id: str
    base_uri: str


def _offsets(data: Dict[str, Any]) -> List[PartitionOffset]:
    return [
        PartitionOffset(
            partition=item.get("partition"),
            offset=item.get("offset"),
            error_code=item.get("error_code"),
            error=item.get("error"),
        )
        for item in data.get("offsets", [])
    ]


def _topics(data: Any) -> List[str]:
    if not isinstance(data, list):
        raise TypeError("expected a list of topic names")
    return [str(name) for name in data]


@dataclass(frozen=True)
class GetTopics(Action[List[str]]):
    codec = JsonCodec(_topics)

    target = "/topics"

    def build_request(self) -> WireRequest:
        return WireRequest.of("GET", self.target, {"Accept": ACCEPT})

    def decode_response(self, response: WireResponse) -> Result[List[str], RemoteFailure]:
        return decode_with(self.codec, "GET", self.target, response)


@dataclass(frozen=True)
class ProduceMessages(Action[List[PartitionOffset]]):
    topic: str
    records: List[Record] = field(default_factory=list)
    codec = JsonCodec(_offsets, content_type=JSON_RECORDS)

    @property
    def target(self) -> str:
        return f"/topics/{self.topic}"

    def build_request(self) -> WireRequest:
        body = self.codec.encode({"records": [r.to_json() for r in self.records]})
        return WireRequest.of("POST", self.target, {"Content-Type": JSON_RECORDS, "Accept": ACCEPT}, body)

    def decode_response(self, response: WireResponse) -> Result[List[PartitionOffset], RemoteFailure]:
        return decode_with(self.codec, "POST", self.target, response, empty_body=EMPTY_OBJECT)


@dataclass(frozen=True)
class CreateConsumer(Action[ConsumerInstance]):
    group: str
    name: Optional[str] = None
    format: str = "json"
    auto_offset_reset: Optional[str] = None
    codec = JsonCodec(lambda data: ConsumerInstance(instance_id=data["instance_id"], base_uri=data["base_uri"]))

    @property
    def target(self) -> str:
        return f"/consumers/{self.group}"

    def build_request(self) -> WireRequest:
        fields: Dict[str, Any] = {"format": self.format}
        if self.name is not None:
            fields["name"] = self.name
        if self.auto_offset_reset is not None:
            fields["auto.offset.reset"] = self.auto_offset_reset
        return WireRequest.of(
            "POST", self.target, {"Content-Type": ACCEPT, "Accept": ACCEPT}, JsonCodec().encode(fields)
        )

    def decode_response(self, response: WireResponse) -> Result[ConsumerInstance, RemoteFailure]:
        return decode_with(self.codec, "POST", self.target, response, empty_body=EMPTY_OBJECT)


@dataclass(frozen=True)
class DeleteConsumer(Action[None]):
    group: str
    instance: str

    @property
    def target(self) -> str:
        return f"/consumers/{self.group}/instances/{self.instance}"

    def build_request(self) -> WireRequest:
        return WireRequest.of("DELETE", self.target, {"Content-Type": ACCEPT})

    def decode_response(self, response: WireResponse) -> Result[None, RemoteFailure]:
        return no_content("DELETE", self.target, response)


def kafka_rest_config(
    base_url: str,
    transport: Transport,
    *,
    credentials: Optional[CredentialsProvider] = None,
) -> DispatcherConfig:
    return DispatcherConfig(
        transport=transport,
        auth=BasicAuth(credentials or env_basic("KAFKA_REST_USERNAME", "KAFKA_REST_PASSWORD")),
        base_url=base_url,
        codec=JsonCodec(),
        name="kafka-rest",
    )
