"""Install pgdbd on a host that already exists and is reachable over SSH."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from loguru import logger

from pgdb.api.model import BootstrapResult
from pgdb.config import ConfigStore, validate_url
from pgdb.core.exceptions import ConfigurationError, RemoteExecutionError

from .remote import RemoteShellExecutor, SSHExecutor
from .script import build_bootstrap_script

DEFAULT_USER = "root"
DEFAULT_PATH = "/opt/pgdb"
DEFAULT_PORT = 8080


@dataclass(frozen=True, slots=True)
class BootstrapSpec:
    """Where and how to install pgdbd.

    Args:
        host: SSH target host.
        repo_url: Git URL of the pgdb repository.
        user: SSH user.
        path: Install path on the host.
        pgdb_port: Port pgdbd listens on.
        public_host: Host clients use to reach pgdbd. Defaults to ``host``;
            pass it explicitly when ``host`` is a private address.
        token: Pre-shared API token. Generated when omitted.
    """

    host: str
    repo_url: str
    user: str = DEFAULT_USER
    path: str = DEFAULT_PATH
    pgdb_port: int = DEFAULT_PORT
    public_host: str | None = None
    token: str | None = None


def generate_token() -> str:
    return secrets.token_hex(32)


class RemoteBootstrapper:
    def __init__(
        self,
        store: ConfigStore,
        executor: RemoteShellExecutor | None = None,
    ) -> None:
        self._store = store
        self._executor = executor or SSHExecutor()
        self._log = logger.bind(component="bootstrap")

    @staticmethod
    def _validate(spec: BootstrapSpec) -> str:
        if not spec.host:
            raise ConfigurationError("--host is required")
        # ssh would parse a leading dash in user@host as an option
        for flag, value in (("--host", spec.host), ("--user", spec.user)):
            if value.startswith("-"):
                raise ConfigurationError(f"{flag} must not start with '-', got {value}")
        if not spec.repo_url:
            raise ConfigurationError("--repo-url is required")
        if not spec.path.startswith("/"):
            raise ConfigurationError(f"--path must be absolute, got {spec.path}")
        port = spec.pgdb_port
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigurationError(f"--pgdb-port must be between 1 and 65535, got {port}")
        return validate_url(f"http://{spec.public_host or spec.host}:{port}")

    async def bootstrap(self, spec: BootstrapSpec) -> BootstrapResult:
        """Install and start pgdbd on ``spec.host``.

        Raises:
            ConfigurationError: Missing host or repository URL, bad path, port or
                daemon URL, or an unreadable config file. Raised before ssh runs.
            RemoteShellLaunchError: ssh could not be started.
            RemoteExecutionError: The remote script exited non-zero.
        """
        daemon_url = self._validate(spec)
        config = self._store.load()
        user = spec.user or DEFAULT_USER
        public_host = spec.public_host or spec.host
        token = spec.token or generate_token()

        script = build_bootstrap_script(
            repo_url=spec.repo_url,
            path=spec.path,
            token=token,
            public_host=public_host,
            pgdb_port=spec.pgdb_port,
        )

        target = f"{user}@{spec.host}"
        self._log.info("Bootstrapping pgdbd on {target}", target=target, host=spec.host)
        code = await self._executor.run_script(target, script)
        if code != 0:
            raise RemoteExecutionError(code)

        self._store.set_default_server(daemon_url, config)

        return BootstrapResult(
            host=spec.host,
            user=user,
            daemon_url=daemon_url,
            token=token,
            next_steps=(
                f"export PGDB_TOKEN={token}",
                f"pgdb config set server.default {daemon_url}",
                "pgdb deploy",
            ),
        )
