"""Async HTTP client for the Hetzner Cloud API."""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

from loguru import logger

from pgdb.core.exceptions import HetznerApiError
from pgdb.infra.http import BearerAuth, HttpClient, HttpError

from .types import (
    Firewall,
    FirewallRule,
    Server,
    Volume,
    parse_firewall,
    parse_server,
    parse_volume,
)

HCLOUD_API_BASE = "https://api.hetzner.cloud/v1"

Method: TypeAlias = Literal["GET", "POST", "DELETE"]


class HetznerClient:
    """Async HTTP client for the Hetzner Cloud API.

    Every call is a single attempt; callers decide whether a failure is
    terminal.

    Example:
        async with HetznerClient(token="...") as client:
            server = await client.get_server(42)
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = HCLOUD_API_BASE,
        timeout: float = 30.0,
    ) -> None:
        self._http = HttpClient(
            base_url,
            BearerAuth(token),
            timeout=timeout,
            default_headers={"Content-Type": "application/json"},
        )
        self._log = logger.bind(provider="hetzner", component="client")

    async def __aenter__(self) -> HetznerClient:
        return self

    async def __aexit__(self, *_args: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def request(
        self,
        method: Method,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Issue an authenticated JSON request and return the decoded body."""
        try:
            data = await self._http.request(method, path, json=json)
        except HttpError as e:
            self._log.warning(
                "API error {method} {path}: {status}",
                method=method, path=path, status=e.status,
            )
            raise HetznerApiError(method, path, e.status, e.body) from e
        return data if data is not None else {}

    # =========================================================================
    # Firewalls
    # =========================================================================

    async def create_firewall(self, name: str, rules: list[FirewallRule]) -> Firewall:
        self._log.debug("Creating firewall {name}", name=name)
        data = await self.request("POST", "/firewalls", {"name": name, "rules": rules})
        return parse_firewall(data)

    async def delete_firewall(self, firewall_id: int) -> None:
        await self.request("DELETE", f"/firewalls/{firewall_id}")

    # =========================================================================
    # Volumes
    # =========================================================================

    async def create_volume(
        self,
        *,
        name: str,
        size: int,
        location: str,
        format: str = "ext4",
        automount: bool = True,
    ) -> Volume:
        self._log.debug("Creating volume {name} ({size} GB)", name=name, size=size)
        data = await self.request(
            "POST",
            "/volumes",
            {
                "name": name,
                "size": size,
                "location": location,
                "format": format,
                "automount": automount,
            },
        )
        return parse_volume(data)

    async def delete_volume(self, volume_id: int) -> None:
        await self.request("DELETE", f"/volumes/{volume_id}")

    # =========================================================================
    # Servers
    # =========================================================================

    async def create_server(
        self,
        *,
        name: str,
        server_type: str,
        image: str,
        location: str,
        ssh_keys: list[int],
        firewall_ids: list[int],
        volume_ids: list[int],
        user_data: str,
    ) -> Server:
        self._log.debug("Creating server {name} ({type})", name=name, type=server_type)
        data = await self.request(
            "POST",
            "/servers",
            {
                "name": name,
                "server_type": server_type,
                "image": image,
                "location": location,
                "ssh_keys": ssh_keys,
                "firewalls": [{"firewall": fid} for fid in firewall_ids],
                "volumes": volume_ids,
                "user_data": user_data,
            },
        )
        return parse_server(data, endpoint="POST /servers")

    async def get_server(self, server_id: int) -> Server:
        data = await self.request("GET", f"/servers/{server_id}")
        return parse_server(data, endpoint=f"GET /servers/{server_id}")

    async def delete_server(self, server_id: int) -> None:
        await self.request("DELETE", f"/servers/{server_id}")
