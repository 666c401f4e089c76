"""JSON-backed server alias configuration.

Loads ``~/.config/pgdb/config.json`` (or ``$PGDB_CONFIG``), which maps
short aliases to pgdbd base URLs and names one alias as the default.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias
from urllib.parse import urlsplit

from loguru import logger

from pgdb.core.exceptions import ConfigurationError

RawConfig: TypeAlias = dict[str, Any]

DEFAULT_ALIAS = "default"
CONFIG_PATH_ENV = "PGDB_CONFIG"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "pgdb" / "config.json"


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_PATH_ENV)
    return Path(override).expanduser() if override else GLOBAL_CONFIG_PATH


def validate_url(value: str) -> str:
    """Return ``value`` if it is an absolute http(s) URL, else raise."""
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid URL: {value}") from e
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(f"Invalid URL: {value}")
    if parts.scheme not in ("http", "https"):
        raise ConfigurationError(f"URL must use http or https: {value}")
    return value


@dataclass(slots=True)
class ServerConfig:
    """Alias -> pgdbd base URL mapping plus the selected default alias."""

    default_server: str = DEFAULT_ALIAS
    servers: dict[str, str] = field(default_factory=dict)

    def set_server(self, alias: str, url: str) -> None:
        if not alias:
            raise ConfigurationError("Alias cannot be empty")
        self.servers[alias] = validate_url(url)
        if alias == DEFAULT_ALIAS:
            self.default_server = DEFAULT_ALIAS

    def resolve(self, alias: str | None = None) -> tuple[str, str]:
        selected = alias or self.default_server
        url = self.servers.get(selected)
        if not url:
            raise ConfigurationError(
                f"Server alias '{selected}' is not configured. "
                "Run: pgdb config set server.default <url>"
            )
        return selected, url

    def to_dict(self) -> RawConfig:
        return {"defaultServer": self.default_server, "servers": dict(self.servers)}

    @classmethod
    def from_dict(cls, raw: RawConfig) -> ServerConfig:
        servers = raw.get("servers") or {}
        if not isinstance(servers, dict):
            raise ConfigurationError("'servers' must be an object")
        cfg = cls(default_server=raw.get("defaultServer") or DEFAULT_ALIAS)
        for alias, url in servers.items():
            if not isinstance(url, str):
                raise ConfigurationError(f"Server '{alias}' must be a URL string")
            cfg.servers[alias] = validate_url(url)
        return cfg


class ConfigStore:
    """Reads and atomically rewrites the pgdb configuration file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else default_config_path()
        self._log = logger.bind(component="config")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ServerConfig:
        if not self._path.is_file():
            return ServerConfig()
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return ServerConfig()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {self._path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Invalid config in {self._path}: expected an object")
        try:
            return ServerConfig.from_dict(raw)
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid config in {self._path}: {e}") from e

    def save(self, config: ServerConfig) -> None:
        directory = self._path.parent
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        payload = json.dumps(config.to_dict(), indent=2) + "\n"

        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".config-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._log.debug("Wrote {path}", path=str(self._path))

    def set_server(self, alias: str, url: str) -> ServerConfig:
        config = self.load()
        config.set_server(alias, url)
        self.save(config)
        return config

    def set_default_server(self, url: str, config: ServerConfig | None = None) -> ServerConfig:
        """Point the ``default`` alias at ``url`` and select it.

        Pass the ``config`` loaded at the start of a command to write it back
        without reading the file a second time.
        """
        if config is None:
            config = self.load()
        config.set_server(DEFAULT_ALIAS, url)
        self.save(config)
        self._log.info("Default server set to {url}", url=url, alias=DEFAULT_ALIAS)
        return config

    def resolve(self, alias: str | None = None) -> tuple[str, str]:
        return self.load().resolve(alias)
