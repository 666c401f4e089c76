from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import aiohttp
from loguru import logger

# ─── Errors ──────────────────────────────────────────────────────────


class HttpError(Exception):
    """Non-success HTTP status or transport failure (status 0)."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(status, body)

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.body}"


# ─── Auth ────────────────────────────────────────────────────────────


@runtime_checkable
class Auth(Protocol):
    async def headers(self) -> dict[str, str]: ...


class BearerAuth:
    def __init__(self, token: str) -> None:
        self._token = token

    async def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }


# ─── Client ──────────────────────────────────────────────────────────


class HttpClient:
    def __init__(
        self,
        base_url: str,
        auth: Auth | None = None,
        *,
        timeout: float = 30,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = auth
        self._timeout_seconds = timeout
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._default_headers = default_headers or {}
        self._session: aiohttp.ClientSession | None = None
        self._log = logger.bind(component="http")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _build_headers(self) -> dict[str, str]:
        headers = dict(self._default_headers)
        if self._auth:
            headers.update(await self._auth.headers())
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        session = await self._ensure_session()
        headers = await self._build_headers()
        url = self._url(path)
        self._log.debug("{method} {path}", method=method, path=path)

        try:
            async with session.request(
                method, url, headers=headers, json=json, params=params
            ) as resp:
                return await self._parse(resp)
        except TimeoutError as e:
            raise HttpError(
                status=0,
                body=f"request to {url} timed out after {self._timeout_seconds:g}s",
            ) from e
        except aiohttp.ClientResponseError as e:
            raise HttpError(status=e.status, body=e.message) from e
        except aiohttp.ClientError as e:
            raise HttpError(status=0, body=str(e)) from e

    async def _parse(self, resp: aiohttp.ClientResponse) -> tuple[int, Any]:
        text = await resp.text()
        if not 200 <= resp.status < 300:
            self._log.warning(
                "HTTP {status} from {url}: {body}",
                status=resp.status, url=str(resp.url), body=text[:500],
            )
            raise HttpError(status=resp.status, body=text)
        if not text.strip():
            return resp.status, None
        try:
            return resp.status, await resp.json(content_type=None)
        except ValueError:
            return resp.status, text

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a JSON request and return the decoded body (``None`` when empty)."""
        _, data = await self._send(method, path, json=json, params=params)
        return data

    # ─── Lifecycle ───────────────────────────────────────────────────

    async def close(self) -> None:
        if self._session and not self._session.closed:
            self._log.debug("Closing HTTP session")
            await self._session.close()

    async def __aenter__(self) -> HttpClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
