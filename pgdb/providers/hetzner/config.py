"""Hetzner provider configuration.

Immutable configuration dataclasses for ``pgdb infra init``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pgdb.core.exceptions import ConfigurationError

from .client import HCLOUD_API_BASE

if TYPE_CHECKING:
    from pgdb.config import ConfigStore

    from .provisioner import HetznerProvisioner

TOKEN_ENV_VARS = ("HCLOUD_TOKEN", "HETZNER_TOKEN")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def default_name(now: float | None = None) -> str:
    """``pgdb-<base36 epoch millis>``, unique enough for one operator."""
    millis = int((time.time() if now is None else now) * 1000)
    return f"pgdb-{_base36(millis)}"


def hetzner_token_from_env(environ: Mapping[str, str]) -> str:
    """Return the first non-empty of HCLOUD_TOKEN / HETZNER_TOKEN."""
    for var in TOKEN_ENV_VARS:
        if token := environ.get(var):
            return token
    raise ConfigurationError(
        "HCLOUD_TOKEN (or HETZNER_TOKEN) is required to create Hetzner infrastructure"
    )


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class InfraSpec:
    """What to create for one pgdb host.

    Args:
        name: Base name for server, volume (``<name>-data``) and firewall
            (``<name>-fw``). Generated from the current time when omitted.
        location: Hetzner location code.
        server_type: Hetzner server type.
        image: OS image name.
        volume_size: Data volume size in GB.
        ssh_key_id: ID of an SSH key already registered on the account.
        pgdb_port: Port pgdbd listens on.
        allow_cidr: Source network allowed through the firewall.
    """

    name: str | None = None
    location: str = "nbg1"
    server_type: str = "cpx21"
    image: str = "ubuntu-24.04"
    volume_size: int = 20
    ssh_key_id: int | None = None
    pgdb_port: int = 8080
    allow_cidr: str = "0.0.0.0/0"


@dataclass(frozen=True, slots=True)
class Hetzner:
    """Hetzner Cloud provider configuration.

    Example:
        >>> provisioner = Hetzner(api_token="...").build(ConfigStore())
        >>> result = await provisioner.provision(InfraSpec(ssh_key_id=42))

    Args:
        api_token: Hetzner Cloud API token.
        api_base: API base URL.
        poll_interval: Seconds between server status checks.
        ready_timeout: Seconds to wait for the server to reach ``running``.
        request_timeout: Per-request HTTP timeout in seconds.
        rollback_on_failure: Delete already-created resources when a later
            step fails. Off by default; orphans are then left for manual cleanup.
    """

    api_token: str | None = None
    api_base: str = HCLOUD_API_BASE
    poll_interval: float = 2.0
    ready_timeout: float = 180.0
    request_timeout: float = 30.0
    rollback_on_failure: bool = False

    def build(self, store: ConfigStore) -> HetznerProvisioner:
        """Build a HetznerProvisioner from this configuration."""
        from .provisioner import HetznerProvisioner

        return HetznerProvisioner(config=self, store=store)


__all__ = ["Hetzner", "InfraSpec", "default_name", "hetzner_token_from_env"]
