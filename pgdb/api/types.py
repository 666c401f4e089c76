"""pgdbd API request/response types.

TypedDicts for API payloads - no conversion needed.
"""

from __future__ import annotations

from typing import Literal, NotRequired, TypedDict


class DeployRequest(TypedDict):
    name: NotRequired[str]
    size_gb: NotRequired[int]
    version: NotRequired[int]


class DeployResponse(TypedDict):
    name: str
    host: str
    port: int
    db: str
    user: str
    password: str
    database_url: str
    created_at: str
    postgres_version: str


class StatusItem(TypedDict):
    name: str
    container_id: str
    volume_name: str
    host: str
    host_port: int
    db: str
    user: str
    password: str
    created_at: str
    postgres_version: str
    database_url: str


class StatusResponse(TypedDict):
    items: list[StatusItem]


class DestroyResponse(TypedDict):
    ok: Literal[True]
