"""pgdb command line.

Usage:
    pgdb infra init [--name N] [--location L] [--server-type T] [--image I]
                    [--volume-size GB] [--ssh-key-id ID] [--pgdb-port P]
                    [--allow-cidr CIDR] [--rollback-on-failure] [--json]
    pgdb infra bootstrap --host H --repo-url URL [--user U] [--path P]
                    [--public-host H] [--pgdb-port P] [--token T] [--json]
    pgdb deploy [--name N] [--size GB] [--version V] [--server ALIAS] [--json]
    pgdb status [--server ALIAS] [--json]
    pgdb destroy NAME [--keep-data] [--server ALIAS] [--json]
    pgdb config set server.<alias> <url>

Credentials come from the environment (HCLOUD_TOKEN / HETZNER_TOKEN for
Hetzner, PGDB_TOKEN for pgdbd) and are read here, once, then passed down.
HCLOUD_ENDPOINT overrides the Hetzner API base URL.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Mapping, Sequence
from typing import NoReturn, cast

from loguru import logger
from rich.console import Console

from pgdb.api.daemon import DEPLOY_TIMEOUT, DaemonClient, daemon_token_from_env
from pgdb.config import ConfigStore, default_config_path
from pgdb.core.exceptions import ConfigurationError, PgdbError
from pgdb.observability.logging import (
    LOG_LEVELS,
    LogConfig,
    LogLevel,
    setup_logging,
    teardown_logging,
)
from pgdb.output import (
    print_bootstrap,
    print_deploy,
    print_destroy,
    print_provision,
    print_status,
)
from pgdb.providers.hetzner import HCLOUD_API_BASE, Hetzner, InfraSpec, hetzner_token_from_env
from pgdb.providers.ssh import BootstrapSpec, RemoteBootstrapper

LOG_LEVEL_ENV = "PGDB_LOG_LEVEL"
ENDPOINT_ENV = "HCLOUD_ENDPOINT"


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports usage problems as ConfigurationError."""

    def error(self, message: str) -> NoReturn:
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="pgdb", description="Provision hosts for pgdbd and manage databases")
    parser.add_argument("--config", help="Path to config.json (default: ~/.config/pgdb/config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    parser.add_argument("--log-file", help="Also write debug logs to this file")
    commands = parser.add_subparsers(dest="command", required=True, metavar="command")

    # ─── infra ───────────────────────────────────────────────────────

    infra = commands.add_parser("infra", help="Create or bootstrap a pgdbd host")
    infra_commands = infra.add_subparsers(dest="infra_command", required=True, metavar="subcommand")

    init = infra_commands.add_parser("init", help="Create a Hetzner server, volume and firewall")
    init.add_argument("--name")
    init.add_argument("--location", default="nbg1")
    init.add_argument("--server-type", default="cpx21")
    init.add_argument("--image", default="ubuntu-24.04")
    init.add_argument("--volume-size", type=int, default=20, metavar="GB")
    init.add_argument("--ssh-key-id", type=int, metavar="ID")
    init.add_argument("--pgdb-port", type=int, default=8080)
    init.add_argument("--allow-cidr", default="0.0.0.0/0")
    init.add_argument(
        "--rollback-on-failure",
        action="store_true",
        help="Delete resources created so far if a later step fails",
    )
    init.add_argument("--json", action="store_true")
    init.set_defaults(handler=_infra_init)

    boot = infra_commands.add_parser("bootstrap", help="Install pgdbd on an existing host over SSH")
    boot.add_argument("--host", required=True)
    boot.add_argument("--repo-url", required=True)
    boot.add_argument("--user", default="root")
    boot.add_argument("--path", default="/opt/pgdb")
    boot.add_argument("--public-host")
    boot.add_argument("--pgdb-port", type=int, default=8080)
    boot.add_argument("--token")
    boot.add_argument("--json", action="store_true")
    boot.set_defaults(handler=_infra_bootstrap)

    # ─── daemon ──────────────────────────────────────────────────────

    deploy = commands.add_parser("deploy", help="Create a database on pgdbd")
    deploy.add_argument("--name")
    deploy.add_argument("--size", type=int, metavar="GB")
    deploy.add_argument("--version", type=int, metavar="MAJOR")
    deploy.add_argument("--server", metavar="ALIAS")
    deploy.add_argument("--json", action="store_true")
    deploy.set_defaults(handler=_deploy)

    status = commands.add_parser("status", help="List databases on pgdbd")
    status.add_argument("--server", metavar="ALIAS")
    status.add_argument("--json", action="store_true")
    status.set_defaults(handler=_status)

    destroy = commands.add_parser("destroy", help="Remove a database from pgdbd")
    destroy.add_argument("name")
    destroy.add_argument("--keep-data", action="store_true")
    destroy.add_argument("--server", metavar="ALIAS")
    destroy.add_argument("--json", action="store_true")
    destroy.set_defaults(handler=_destroy)

    # ─── config ──────────────────────────────────────────────────────

    config = commands.add_parser("config", help="Edit server aliases")
    config_commands = config.add_subparsers(dest="config_command", required=True, metavar="subcommand")
    config_set = config_commands.add_parser("set", help="Set server.<alias> to a pgdbd URL")
    config_set.add_argument("key", metavar="server.<alias>")
    config_set.add_argument("value", metavar="url")
    config_set.set_defaults(handler=_config_set)

    return parser


# =============================================================================
# Handlers
# =============================================================================


async def _infra_init(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    provider = Hetzner(
        api_token=hetzner_token_from_env(environ),
        api_base=environ.get(ENDPOINT_ENV) or HCLOUD_API_BASE,
        rollback_on_failure=args.rollback_on_failure,
    )
    spec = InfraSpec(
        name=args.name,
        location=args.location,
        server_type=args.server_type,
        image=args.image,
        volume_size=args.volume_size,
        ssh_key_id=args.ssh_key_id,
        pgdb_port=args.pgdb_port,
        allow_cidr=args.allow_cidr,
    )
    result = await provider.build(store).provision(spec)
    print_provision(console, result, args.json)


async def _infra_bootstrap(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    spec = BootstrapSpec(
        host=args.host,
        repo_url=args.repo_url,
        user=args.user,
        path=args.path,
        pgdb_port=args.pgdb_port,
        public_host=args.public_host,
        token=args.token,
    )
    result = await RemoteBootstrapper(store).bootstrap(spec)
    print_bootstrap(console, result, args.json)


async def _deploy(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    token = daemon_token_from_env(environ)
    _, url = store.resolve(args.server)
    async with DaemonClient(url, token, timeout=DEPLOY_TIMEOUT) as daemon:
        result = await daemon.deploy(name=args.name, size_gb=args.size, version=args.version)
    print_deploy(console, result, args.json)


async def _status(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    token = daemon_token_from_env(environ)
    _, url = store.resolve(args.server)
    async with DaemonClient(url, token) as daemon:
        result = await daemon.status()
    print_status(console, result, args.json)


async def _destroy(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    token = daemon_token_from_env(environ)
    _, url = store.resolve(args.server)
    async with DaemonClient(url, token) as daemon:
        result = await daemon.destroy(args.name, keep_data=args.keep_data)
    print_destroy(console, args.name, result, args.json)


async def _config_set(
    args: argparse.Namespace, environ: Mapping[str, str], store: ConfigStore, console: Console,
) -> None:
    key: str = args.key
    if not key.startswith("server."):
        raise ConfigurationError("Only server.<alias> keys are supported. Example: server.default")
    store.set_server(key.removeprefix("server."), args.value)
    console.out(f"Set {key}={args.value}", highlight=False)


# =============================================================================
# Entry point
# =============================================================================


def _log_config(args: argparse.Namespace, environ: Mapping[str, str]) -> LogConfig:
    level = environ.get(LOG_LEVEL_ENV, "DEBUG" if args.verbose else "INFO").upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"{LOG_LEVEL_ENV} must be one of {', '.join(LOG_LEVELS)}")
    return LogConfig(level=cast(LogLevel, level), console=args.verbose, file=args.log_file)


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run one pgdb command and return the process exit status."""
    env = os.environ if environ is None else environ
    argv = list(sys.argv[1:] if argv is None else argv)
    console = Console(highlight=False)
    err_console = Console(stderr=True, highlight=False)
    parser = build_parser()

    if not argv or argv[0] in ("-h", "--help"):
        parser.print_help()
        return 0

    handler_ids: list[int] = []
    try:
        args = parser.parse_args(argv)
        handler_ids = setup_logging(_log_config(args, env))
        store = ConfigStore(args.config or default_config_path(env))
        asyncio.run(args.handler(args, env, store, console))
    except Exception as e:
        if not isinstance(e, PgdbError):
            logger.opt(exception=e).debug("Unexpected error")
        # one line per failure, even when an API body spans several
        message = " ".join((str(e) or type(e).__name__).splitlines())
        err_console.out(f"Error: {message}", highlight=False)
        return 1
    finally:
        teardown_logging(handler_ids)
    return 0


def run() -> NoReturn:
    sys.exit(main())
