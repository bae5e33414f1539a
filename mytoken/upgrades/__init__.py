"""
UUPS proxy deployment and upgrade tooling.
"""

from .manifest import UpgradesManifest, ImplementationRecord, ProxyRecord, get_manifest
from .plugin import (
    validate_implementation,
    validate_upgrade,
    get_implementation_address,
    deploy_implementation,
    deploy_proxy,
    upgrade_proxy,
)

__all__ = [
    "UpgradesManifest",
    "ImplementationRecord",
    "ProxyRecord",
    "get_manifest",
    "validate_implementation",
    "validate_upgrade",
    "get_implementation_address",
    "deploy_implementation",
    "deploy_proxy",
    "upgrade_proxy",
]
