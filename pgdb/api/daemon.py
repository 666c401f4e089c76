"""Async HTTP client for a pgdbd instance."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from loguru import logger

from pgdb.core.exceptions import ConfigurationError, DaemonApiError
from pgdb.infra.http import BearerAuth, HttpClient, HttpError

from .types import DeployRequest, DeployResponse, DestroyResponse, StatusResponse

TOKEN_ENV_VAR = "PGDB_TOKEN"
DEFAULT_TIMEOUT = 15.0
DEPLOY_TIMEOUT = 90.0


def daemon_token_from_env(environ: Mapping[str, str]) -> str:
    if token := environ.get(TOKEN_ENV_VAR):
        return token
    raise ConfigurationError(f"{TOKEN_ENV_VAR} is required in the environment")


class DaemonClient:
    """Client for the deploy/status/destroy endpoints of pgdbd.

    Example:
        async with DaemonClient("http://203.0.113.9:8080", token) as daemon:
            status = await daemon.status()
    """

    def __init__(self, base_url: str, token: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._http = HttpClient(
            base_url,
            BearerAuth(token),
            timeout=timeout,
            default_headers={"Content-Type": "application/json"},
        )
        self._log = logger.bind(component="daemon")

    async def __aenter__(self) -> DaemonClient:
        return self

    async def __aexit__(self, *_args: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            return await self._http.request(method, path, json=json, params=params)
        except HttpError as e:
            raise DaemonApiError(e.status, e.body) from e

    async def deploy(
        self,
        *,
        name: str | None = None,
        size_gb: int | None = None,
        version: int | None = None,
    ) -> DeployResponse:
        body: DeployRequest = {}
        if name:
            body["name"] = name
        if size_gb is not None:
            body["size_gb"] = size_gb
        if version is not None:
            body["version"] = version
        self._log.debug("Deploying {name}", name=name or "<generated>")
        return await self._request("POST", "/v1/deploy", json=dict(body))

    async def status(self) -> StatusResponse:
        result = await self._request("GET", "/v1/status")
        return result or {"items": []}

    async def destroy(self, name: str, *, keep_data: bool = False) -> DestroyResponse:
        self._log.debug("Destroying {name} (keep_data={keep})", name=name, keep=keep_data)
        return await self._request(
            "DELETE",
            f"/v1/db/{quote(name, safe='')}",
            params={"keep_data": "true" if keep_data else "false"},
        )
