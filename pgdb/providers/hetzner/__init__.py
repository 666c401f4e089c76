"""Hetzner Cloud provisioning for pgdb hosts."""

from .client import HCLOUD_API_BASE, HetznerClient
from .config import Hetzner, InfraSpec, hetzner_token_from_env
from .provisioner import HetznerProvisioner

__all__ = [
    "HCLOUD_API_BASE",
    "Hetzner",
    "HetznerClient",
    "HetznerProvisioner",
    "InfraSpec",
    "hetzner_token_from_env",
]
