"""
MyToken Unified Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    MyTokenConfig,
    NetworkConfig,
    DeployConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "MyTokenConfig",
    "NetworkConfig",
    "DeployConfig",
    "LoggingConfig",
    "load_config",
]
