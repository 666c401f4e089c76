"""SSH bootstrap of pre-existing hosts."""

from .bootstrapper import BootstrapSpec, RemoteBootstrapper, generate_token
from .remote import RemoteShellExecutor, SSHExecutor
from .script import build_bootstrap_script

__all__ = [
    "BootstrapSpec",
    "RemoteBootstrapper",
    "RemoteShellExecutor",
    "SSHExecutor",
    "build_bootstrap_script",
    "generate_token",
]
