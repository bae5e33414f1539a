"""
MyToken TOML Configuration Loader

Loads every section of config.toml with environment variable overrides
(dataclass + from_dict + apply_env per section).

Environment variable mapping:
    [network] chain_id        → MYTOKEN_CHAIN_ID
    [network] accounts        → MYTOKEN_ACCOUNTS
    [deploy]  contract        → MYTOKEN_CONTRACT
    [deploy]  upgrade_to      → MYTOKEN_UPGRADE_TO
    [logging] level           → MYTOKEN_LOG_LEVEL
    ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from eth_utils import to_wei

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_ACCOUNT_SEED,
    DEFAULT_CHAIN_ID,
    DEFAULT_INITIALIZER,
    SUPPORTED_PROXY_KINDS,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class NetworkConfig:
    """[network] section."""
    chain_id: int = DEFAULT_CHAIN_ID
    accounts: int = DEFAULT_ACCOUNT_COUNT
    initial_balance_ether: int = 10_000
    account_seed: str = DEFAULT_ACCOUNT_SEED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        return cls(
            chain_id=data.get("chain_id", DEFAULT_CHAIN_ID),
            accounts=data.get("accounts", DEFAULT_ACCOUNT_COUNT),
            initial_balance_ether=data.get("initial_balance_ether", 10_000),
            account_seed=data.get("account_seed", DEFAULT_ACCOUNT_SEED),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("MYTOKEN_CHAIN_ID"):
            self.chain_id = int(v)
        if v := os.environ.get("MYTOKEN_ACCOUNTS"):
            self.accounts = int(v)
        if v := os.environ.get("MYTOKEN_INITIAL_BALANCE_ETHER"):
            self.initial_balance_ether = int(v)
        if v := os.environ.get("MYTOKEN_ACCOUNT_SEED"):
            self.account_seed = v

    @property
    def initial_balance_wei(self) -> int:
        return to_wei(self.initial_balance_ether, "ether")


@dataclass
class DeployConfig:
    """[deploy] section."""
    contract: str = "MyToken"
    upgrade_to: str = "MyToken2"
    initializer: str = DEFAULT_INITIALIZER
    kind: str = "uups"
    deployer_index: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployConfig":
        return cls(
            contract=data.get("contract", "MyToken"),
            upgrade_to=data.get("upgrade_to", "MyToken2"),
            initializer=data.get("initializer", DEFAULT_INITIALIZER),
            kind=data.get("kind", "uups"),
            deployer_index=data.get("deployer_index", 0),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("MYTOKEN_CONTRACT"):
            self.contract = v
        if (v := os.environ.get("MYTOKEN_UPGRADE_TO")) is not None:
            self.upgrade_to = v
        if v := os.environ.get("MYTOKEN_PROXY_KIND"):
            self.kind = v
        if v := os.environ.get("MYTOKEN_DEPLOYER_INDEX"):
            self.deployer_index = int(v)


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    file: str = ""
    console: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            file=data.get("file", ""),
            console=data.get("console", True),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("MYTOKEN_LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("MYTOKEN_LOG_FILE"):
            self.file = v


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class MyTokenConfig:
    """
    Unified configuration.

    Loads every section of config.toml and applies environment variable
    overrides. This is the single source of truth at runtime.
    """
    network: NetworkConfig = field(default_factory=NetworkConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MyTokenConfig":
        """Create MyTokenConfig from a parsed TOML dict."""
        return cls(
            network=NetworkConfig.from_dict(data.get("network", {})),
            deploy=DeployConfig.from_dict(data.get("deploy", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "MyTokenConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides); a malformed one
        raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.network.apply_env()
        self.deploy.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if self.network.chain_id < 1:
            raise ConfigurationError("chain_id must be >= 1")
        if self.network.accounts < 1:
            raise ConfigurationError("accounts must be >= 1")
        if self.network.initial_balance_ether < 0:
            raise ConfigurationError("initial_balance_ether cannot be negative")
        if not 0 <= self.deploy.deployer_index < self.network.accounts:
            raise ConfigurationError(
                f"deployer_index {self.deploy.deployer_index} out of range for "
                f"{self.network.accounts} account(s)"
            )
        if self.deploy.kind not in SUPPORTED_PROXY_KINDS:
            raise ConfigurationError(f"Unsupported proxy kind: {self.deploy.kind}")
        if not self.deploy.contract:
            raise ConfigurationError("deploy.contract must name an artifact")
        if self.logging.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "network": {
                "chain_id": self.network.chain_id,
                "accounts": self.network.accounts,
                "initial_balance_ether": self.network.initial_balance_ether,
                "account_seed": self.network.account_seed,
            },
            "deploy": {
                "contract": self.deploy.contract,
                "upgrade_to": self.deploy.upgrade_to,
                "initializer": self.deploy.initializer,
                "kind": self.deploy.kind,
                "deployer_index": self.deploy.deployer_index,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "console": self.logging.console,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> MyTokenConfig:
    """
    Load configuration.

    Resolution order:
        1. Explicit *path* argument
        2. MYTOKEN_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("MYTOKEN_CONFIG", "config.toml")

    return MyTokenConfig.from_file(path)
