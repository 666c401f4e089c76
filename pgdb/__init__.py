"""pgdb - provision and bootstrap hosts running the pgdbd database daemon.

Two strategies share one alias store:

    from pgdb import ConfigStore, Hetzner, InfraSpec

    store = ConfigStore()
    result = await Hetzner(api_token=token).build(store).provision(InfraSpec(ssh_key_id=42))
    print(result.daemon_url)

or, for a host that already exists:

    from pgdb import BootstrapSpec, RemoteBootstrapper

    result = await RemoteBootstrapper(store).bootstrap(
        BootstrapSpec(host="203.0.113.9", repo_url="https://example.com/pgdb.git"),
    )
"""

from loguru import logger

from pgdb.api import BootstrapResult, DaemonClient, ProvisionResult
from pgdb.config import ConfigStore, ServerConfig
from pgdb.core.exceptions import (
    ConfigurationError,
    PgdbError,
    ReadinessTimeoutError,
    RemoteExecutionError,
)
from pgdb.providers import BootstrapSpec, Hetzner, InfraSpec, RemoteBootstrapper

# Library behaviour: silent until the CLI (or the caller) enables "pgdb".
logger.disable("pgdb")

__version__ = "0.1.0"

__all__ = [
    "BootstrapResult",
    "BootstrapSpec",
    "ConfigStore",
    "ConfigurationError",
    "DaemonClient",
    "Hetzner",
    "InfraSpec",
    "PgdbError",
    "ProvisionResult",
    "ReadinessTimeoutError",
    "RemoteBootstrapper",
    "RemoteExecutionError",
    "ServerConfig",
    "__version__",
]
