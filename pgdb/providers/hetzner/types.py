"""Hetzner Cloud API response types.

TypedDicts describe the raw payloads; the parse_* helpers validate the
fields pgdb relies on and return frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, NotRequired, TypeAlias, TypedDict, TypeVar

from pgdb.core.exceptions import MalformedResponseError

ServerStatus: TypeAlias = Literal[
    "initializing",
    "starting",
    "running",
    "stopping",
    "off",
    "deleting",
    "migrating",
    "rebuilding",
    "unknown",
]


# =============================================================================
# Raw payloads
# =============================================================================


class FirewallRule(TypedDict):
    direction: Literal["in", "out"]
    protocol: Literal["tcp", "udp", "icmp"]
    port: str
    source_ips: list[str]
    description: NotRequired[str]


class FirewallPayload(TypedDict):
    id: int
    name: str
    rules: NotRequired[list[FirewallRule]]


class FirewallResponse(TypedDict):
    firewall: FirewallPayload


class VolumePayload(TypedDict):
    id: int
    name: str
    size: int
    location: NotRequired[dict[str, Any]]
    format: NotRequired[str | None]


class VolumeResponse(TypedDict):
    volume: VolumePayload


class IPv4Payload(TypedDict):
    ip: str


class PublicNetPayload(TypedDict):
    ipv4: NotRequired[IPv4Payload | None]


class ServerPayload(TypedDict):
    id: int
    name: str
    status: ServerStatus
    public_net: NotRequired[PublicNetPayload]


class ServerResponse(TypedDict):
    server: ServerPayload


# =============================================================================
# Validated models
# =============================================================================


@dataclass(frozen=True, slots=True)
class Firewall:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Volume:
    id: int
    name: str
    size: int


@dataclass(frozen=True, slots=True)
class Server:
    id: int
    name: str
    status: str
    ipv4: str | None = None

    @property
    def is_running(self) -> bool:
        return self.status == "running"


def _envelope(data: Any, key: str, endpoint: str) -> dict[str, Any]:
    if not isinstance(data, dict) or not isinstance(data.get(key), dict):
        raise MalformedResponseError(endpoint, key)
    return data[key]


T = TypeVar("T")


def _require(payload: dict[str, Any], field: str, kind: type[T], endpoint: str) -> T:
    value = payload.get(field)
    # bool is an int subclass; ids and sizes must be real integers
    if not isinstance(value, kind) or isinstance(value, bool):
        raise MalformedResponseError(endpoint, field)
    return value


def parse_firewall(data: Any, endpoint: str = "POST /firewalls") -> Firewall:
    fw = _envelope(data, "firewall", endpoint)
    return Firewall(
        id=_require(fw, "id", int, endpoint),
        name=_require(fw, "name", str, endpoint),
    )


def parse_volume(data: Any, endpoint: str = "POST /volumes") -> Volume:
    vol = _envelope(data, "volume", endpoint)
    return Volume(
        id=_require(vol, "id", int, endpoint),
        name=_require(vol, "name", str, endpoint),
        size=_require(vol, "size", int, endpoint),
    )


def parse_server(data: Any, endpoint: str = "GET /servers") -> Server:
    srv = _envelope(data, "server", endpoint)
    ipv4: str | None = None
    public_net = srv.get("public_net") or {}
    if isinstance(public_net, dict):
        v4 = public_net.get("ipv4") or {}
        if isinstance(v4, dict) and isinstance(v4.get("ip"), str) and v4["ip"]:
            ipv4 = v4["ip"]
    return Server(
        id=_require(srv, "id", int, endpoint),
        name=_require(srv, "name", str, endpoint),
        status=_require(srv, "status", str, endpoint),
        ipv4=ipv4,
    )
