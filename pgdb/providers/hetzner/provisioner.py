"""Hetzner Cloud provisioning for a pgdb host.

Creates, in order, a firewall, a data volume and a server wired to both,
waits for the server to report ``running`` and records the resulting
pgdbd URL as the ``default`` server alias.

Each step needs the previous step's id, so nothing runs concurrently.
Resources created before a failure are left in place unless
``rollback_on_failure`` is set.
"""

from __future__ import annotations

import asyncio
import ipaddress
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from pgdb.api.model import FirewallSummary, ProvisionResult, ServerSummary, VolumeSummary
from pgdb.config import ConfigStore
from pgdb.core.exceptions import ConfigurationError, PgdbError, ProvisioningError
from pgdb.providers.wait import wait_for_ready

from .client import HetznerClient
from .cloud_init import generate_cloud_init
from .config import Hetzner, InfraSpec, default_name
from .types import FirewallRule, Server

SSH_PORT = 22


@dataclass(frozen=True, slots=True)
class _Created:
    kind: Literal["firewall", "volume", "server"]
    id: int


def firewall_rules(pgdb_port: int, allow_cidr: str) -> list[FirewallRule]:
    return [
        {
            "direction": "in",
            "protocol": "tcp",
            "port": str(SSH_PORT),
            "source_ips": [allow_cidr],
            "description": "SSH",
        },
        {
            "direction": "in",
            "protocol": "tcp",
            "port": str(pgdb_port),
            "source_ips": [allow_cidr],
            "description": "pgdbd API",
        },
    ]


def next_steps(ip: str, pgdb_port: int) -> tuple[str, ...]:
    return (
        f"ssh root@{ip}",
        "Set a strong token on the server: export PGDB_TOKEN=$(openssl rand -hex 32)",
        f"Set daemon host/port: export PGDB_PUBLIC_HOST={ip} && export PGDB_LISTEN=:{pgdb_port}",
        "Clone this repository on the server and run: sudo -E ./scripts/install.sh",
        "On your local machine set the same token: export PGDB_TOKEN=<same-token>",
        "Then run: pgdb deploy",
    )


def _validate_port(port: int) -> None:
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigurationError(f"--pgdb-port must be between 1 and 65535, got {port}")


class HetznerProvisioner:
    """Stateless-per-run Hetzner provisioning service."""

    def __init__(
        self,
        config: Hetzner,
        store: ConfigStore,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._store = store
        self._clock = clock
        self._sleep = sleep
        self._log = logger.bind(provider="hetzner", component="provisioner")

    def _validate(self, spec: InfraSpec) -> tuple[str, int]:
        if not self._config.api_token:
            raise ConfigurationError(
                "HCLOUD_TOKEN (or HETZNER_TOKEN) is required to create Hetzner infrastructure"
            )
        key_id = spec.ssh_key_id
        if isinstance(key_id, bool) or not isinstance(key_id, int) or key_id <= 0:
            raise ConfigurationError("--ssh-key-id is required (use an existing Hetzner SSH key id)")
        _validate_port(spec.pgdb_port)
        if spec.volume_size <= 0:
            raise ConfigurationError(f"--volume-size must be positive, got {spec.volume_size}")
        try:
            ipaddress.ip_network(spec.allow_cidr, strict=False)
        except ValueError as e:
            raise ConfigurationError(f"Invalid --allow-cidr: {spec.allow_cidr}") from e
        return spec.name or default_name(), key_id

    async def provision(self, spec: InfraSpec) -> ProvisionResult:
        """Run the full create -> wait -> persist sequence.

        Raises:
            ConfigurationError: Before any API call, for bad input, a missing token
                or an unreadable config file.
            HetznerApiError: Any non-success API response.
            ReadinessTimeoutError: Server not ``running`` within ``ready_timeout``.
            ProvisioningError: Server running without a public IPv4.
        """
        name, ssh_key_id = self._validate(spec)
        config = self._store.load()
        created: list[_Created] = []

        async with HetznerClient(
            self._config.api_token or "",
            base_url=self._config.api_base,
            timeout=self._config.request_timeout,
        ) as client:
            try:
                firewall = await client.create_firewall(
                    f"{name}-fw", firewall_rules(spec.pgdb_port, spec.allow_cidr),
                )
                created.append(_Created("firewall", firewall.id))
                self._log.info("Created firewall {name} (id={id})", name=firewall.name, id=firewall.id)

                volume = await client.create_volume(
                    name=f"{name}-data",
                    size=spec.volume_size,
                    location=spec.location,
                )
                created.append(_Created("volume", volume.id))
                self._log.info(
                    "Created volume {name} (id={id}, {size} GB)",
                    name=volume.name, id=volume.id, size=volume.size,
                )

                server = await client.create_server(
                    name=name,
                    server_type=spec.server_type,
                    image=spec.image,
                    location=spec.location,
                    ssh_keys=[ssh_key_id],
                    firewall_ids=[firewall.id],
                    volume_ids=[volume.id],
                    user_data=generate_cloud_init(spec.pgdb_port),
                )
                created.append(_Created("server", server.id))
                self._log.info("Created server {name} (id={id})", name=server.name, id=server.id)

                ready = await self._wait_running(client, server.id)
                if not ready.ipv4:
                    raise ProvisioningError(
                        "Hetzner server was created but no public IPv4 was assigned"
                    )
            except Exception:
                if self._config.rollback_on_failure and created:
                    await self._rollback(client, created)
                elif created:
                    self._log.warning(
                        "Provisioning failed; left behind: {resources}",
                        resources=", ".join(f"{c.kind} {c.id}" for c in created),
                    )
                raise

        daemon_url = f"http://{ready.ipv4}:{spec.pgdb_port}"
        self._store.set_default_server(daemon_url, config)

        return ProvisionResult(
            server=ServerSummary(id=ready.id, name=ready.name, ipv4=ready.ipv4, status=ready.status),
            volume=VolumeSummary(id=volume.id, name=volume.name, size_gb=volume.size),
            firewall=FirewallSummary(id=firewall.id, name=firewall.name),
            daemon_url=daemon_url,
            next_steps=next_steps(ready.ipv4, spec.pgdb_port),
        )

    async def _wait_running(self, client: HetznerClient, server_id: int) -> Server:
        self._log.info(
            "Waiting for server {id} to reach running (timeout {t:g}s)",
            id=server_id, t=self._config.ready_timeout, server_id=server_id,
        )

        async def poll() -> Server:
            server = await client.get_server(server_id)
            self._log.debug("Server {id} status: {status}", id=server_id, status=server.status)
            return server

        return await wait_for_ready(
            poll,
            lambda s: s.is_running,
            timeout=self._config.ready_timeout,
            interval=self._config.poll_interval,
            description=f"Hetzner server {server_id} to reach running state",
            clock=self._clock,
            sleep=self._sleep,
        )

    async def _rollback(self, client: HetznerClient, created: list[_Created]) -> None:
        deleters = {
            "server": client.delete_server,
            "volume": client.delete_volume,
            "firewall": client.delete_firewall,
        }
        for resource in reversed(created):
            try:
                await deleters[resource.kind](resource.id)
                self._log.info("Rolled back {kind} {id}", kind=resource.kind, id=resource.id)
            except PgdbError as e:
                self._log.warning(
                    "Could not delete {kind} {id}: {error}",
                    kind=resource.kind, id=resource.id, error=str(e),
                )
