from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal


@dataclass(frozen=True, slots=True)
class ServerSummary:
    id: int
    name: str
    ipv4: str
    status: str


@dataclass(frozen=True, slots=True)
class VolumeSummary:
    id: int
    name: str
    size_gb: int


@dataclass(frozen=True, slots=True)
class FirewallSummary:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ProvisionResult:
    """Outcome of a successful ``pgdb infra init`` run."""
    server: ServerSummary
    volume: VolumeSummary
    firewall: FirewallSummary
    daemon_url: str
    next_steps: tuple[str, ...]
    provider: Literal["hetzner"] = "hetzner"

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "server": asdict(self.server),
            "volume": asdict(self.volume),
            "firewall": asdict(self.firewall),
            "daemon_url": self.daemon_url,
            "next_steps": list(self.next_steps),
        }


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    """Outcome of a successful ``pgdb infra bootstrap`` run."""
    host: str
    user: str
    daemon_url: str
    token: str
    next_steps: tuple[str, ...]
    service_status: Literal["installed"] = "installed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "user": self.user,
            "daemon_url": self.daemon_url,
            "token": self.token,
            "service_status": self.service_status,
            "next_steps": list(self.next_steps),
        }
