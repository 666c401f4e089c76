"""Result models and the pgdbd API client."""

from .daemon import DaemonClient, daemon_token_from_env
from .model import (
    BootstrapResult,
    FirewallSummary,
    ProvisionResult,
    ServerSummary,
    VolumeSummary,
)

__all__ = [
    "BootstrapResult",
    "DaemonClient",
    "FirewallSummary",
    "ProvisionResult",
    "ServerSummary",
    "VolumeSummary",
    "daemon_token_from_env",
]
