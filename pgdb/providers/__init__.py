"""Provisioning strategies: Hetzner Cloud API and SSH bootstrap."""

from .hetzner import Hetzner, HetznerProvisioner, InfraSpec
from .ssh import BootstrapSpec, RemoteBootstrapper, SSHExecutor
from .wait import wait_for_ready

__all__ = [
    "BootstrapSpec",
    "Hetzner",
    "HetznerProvisioner",
    "InfraSpec",
    "RemoteBootstrapper",
    "SSHExecutor",
    "wait_for_ready",
]
