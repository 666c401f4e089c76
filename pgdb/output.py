"""Human-readable and JSON rendering of command results."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from rich.console import Console

from pgdb.api.model import BootstrapResult, ProvisionResult
from pgdb.api.types import DeployResponse, DestroyResponse, StatusResponse


def _emit_json(console: Console, data: Any) -> None:
    console.out(json.dumps(data, indent=2), highlight=False)


def _emit_lines(console: Console, lines: Iterable[str]) -> None:
    for line in lines:
        console.out(line, highlight=False)


def _steps(steps: Iterable[str]) -> list[str]:
    return ["next_steps:", *(f"  - {step}" for step in steps)]


def print_provision(console: Console, result: ProvisionResult, as_json: bool) -> None:
    if as_json:
        _emit_json(console, result.to_dict())
        return
    s, v, f = result.server, result.volume, result.firewall
    _emit_lines(console, [
        f"provider: {result.provider}",
        f"server: {s.name} (id={s.id}, ip={s.ipv4})",
        f"volume: {v.name} (id={v.id}, size_gb={v.size_gb})",
        f"firewall: {f.name} (id={f.id})",
        f"daemon_url: {result.daemon_url}",
        *_steps(result.next_steps),
    ])


def print_bootstrap(console: Console, result: BootstrapResult, as_json: bool) -> None:
    if as_json:
        _emit_json(console, result.to_dict())
        return
    _emit_lines(console, [
        f"host: {result.host}",
        f"user: {result.user}",
        f"service_status: {result.service_status}",
        f"daemon_url: {result.daemon_url}",
        f"token: {result.token}",
        *_steps(result.next_steps),
    ])


def _deploy_shape(result: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": result.get("name"),
        "host": result.get("host"),
        "port": result.get("port"),
        "db": result.get("db"),
        "user": result.get("user"),
        "password": result.get("password"),
        "DATABASE_URL": result.get("database_url"),
    }


def print_deploy(console: Console, result: DeployResponse, as_json: bool) -> None:
    out = _deploy_shape(result)
    if as_json:
        _emit_json(console, out)
        return
    _emit_lines(console, (f"{key}: {value}" for key, value in out.items()))


def print_status(console: Console, result: StatusResponse, as_json: bool) -> None:
    if as_json:
        _emit_json(console, result)
        return
    items = result.get("items") or []
    if not items:
        console.out("No databases found.", highlight=False)
        return
    for item in items:
        _emit_lines(console, [
            f"{item['name']} ({item['postgres_version']})",
            f"  host: {item['host']}",
            f"  port: {item['host_port']}",
            f"  db: {item['db']}",
            f"  user: {item['user']}",
            f"  created_at: {item['created_at']}",
            f"  DATABASE_URL: {item['database_url']}",
        ])


def print_destroy(console: Console, name: str, result: DestroyResponse | None, as_json: bool) -> None:
    data = dict(result or {})
    if as_json:
        _emit_json(console, {"name": name, **data})
        return
    if data.get("ok"):
        console.out(f"Destroyed {name}", highlight=False)
