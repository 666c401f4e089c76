"""Core types shared across pgdb."""

from .exceptions import (
    ApiError,
    ConfigurationError,
    DaemonApiError,
    HetznerApiError,
    MalformedResponseError,
    PgdbError,
    ProvisioningError,
    ReadinessTimeoutError,
    RemoteExecutionError,
    RemoteShellLaunchError,
)

__all__ = [
    "ApiError",
    "ConfigurationError",
    "DaemonApiError",
    "HetznerApiError",
    "MalformedResponseError",
    "PgdbError",
    "ProvisioningError",
    "ReadinessTimeoutError",
    "RemoteExecutionError",
    "RemoteShellLaunchError",
]
