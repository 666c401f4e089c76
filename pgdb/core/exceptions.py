"""Custom exception hierarchy for pgdb.

All pgdb-specific exceptions inherit from PgdbError, so the CLI can turn
any of them into a single ``Error: ...`` line.
"""

from __future__ import annotations


class PgdbError(Exception):
    """Base exception for all pgdb errors."""


class ConfigurationError(PgdbError):
    """Raised for invalid configuration or missing required settings.

    Always raised before any remote side effect takes place.
    """


class ProvisioningError(PgdbError):
    """Raised when cloud provisioning cannot complete."""


class MalformedResponseError(ProvisioningError):
    """Raised when a provider response lacks a required field."""

    def __init__(self, endpoint: str, field: str) -> None:
        self.endpoint = endpoint
        self.field = field
        super().__init__(f"Malformed response from {endpoint}: missing or invalid '{field}'")


class ReadinessTimeoutError(ProvisioningError):
    """Raised when a resource does not become ready before its deadline."""

    def __init__(self, description: str, timeout: float, attempts: int) -> None:
        self.description = description
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"Timed out waiting for {description} after {timeout:g}s ({attempts} checks)"
        )


class ApiError(PgdbError):
    """Raised when a remote HTTP API answers outside the success range."""

    def __init__(self, message: str, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class HetznerApiError(ApiError):
    """Raised when a Hetzner Cloud API call fails."""

    def __init__(self, method: str, path: str, status: int, body: str) -> None:
        self.method = method
        self.path = path
        super().__init__(
            f"Hetzner API {method} {path} failed ({status}): {body}",
            status,
            body,
        )


class DaemonApiError(ApiError):
    """Raised when a pgdbd API call fails."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Request failed ({status}): {body}".strip(), status, body)


class RemoteExecutionError(PgdbError):
    """Raised when a remote script exits with a non-zero status."""

    def __init__(self, exit_code: int) -> None:
        self.exit_code = exit_code
        super().__init__(f"remote bootstrap failed with exit code {exit_code}")


class RemoteShellLaunchError(PgdbError):
    """Raised when the remote shell program cannot be started at all."""
