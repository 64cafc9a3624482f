"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``ETHWALLET_``, nested via ``__``)
2. YAML config file (``config_path`` or ``ETHWALLET_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class StoreEngine(enum.StrEnum):
    """Supported key-value store backends."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


class KeystoreKDF(enum.StrEnum):
    """Key derivation functions accepted by Web3 Secret Storage."""

    SCRYPT = "scrypt"
    PBKDF2 = "pbkdf2"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_SERVER__",
        case_sensitive=False,
    )

    host: str = "127.0.0.1"
    port: int = 3005


class StoreConfig(BaseSettings):
    """Persistent key-value store settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_STORE__",
        case_sensitive=False,
    )

    engine: StoreEngine = Field(
        default=StoreEngine.FILE,
        description="Store backend: memory, file or redis",
    )
    path: str = Field(
        default="./ethwallet.json",
        description="JSON file used by the file backend",
    )
    url: str = "redis://localhost:6379/0"
    max_connections: int = 10
    key: str = "ethwallet:wallet"
    keystore_key: str = "ethwallet:keystore"


class LedgerConfig(BaseSettings):
    """Ethereum JSON-RPC provider settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_LEDGER__",
        case_sensitive=False,
    )

    rpc_url: str = "https://rpc.sepolia.org"
    chain_id: int = 11155111
    timeout: float = 30.0
    gas_limit: int = 21000


class VaultConfig(BaseSettings):
    """Keystore encryption settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_VAULT__",
        case_sensitive=False,
    )

    kdf: KeystoreKDF = KeystoreKDF.SCRYPT
    iterations: int | None = Field(
        default=None,
        description="KDF work factor; None uses the eth-account default",
    )


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


class TaskConfig(BaseSettings):
    """Background task settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_TASK__",
        case_sensitive=False,
    )

    enabled: bool = True
    reconcile_period: float = 30.0


class NotificationsConfig(BaseSettings):
    """Outbound event bus settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_NOTIFICATIONS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``ETHWALLET_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ETHWALLET_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    log_level: str = "info"
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    task: TaskConfig = Field(default_factory=TaskConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                merged = {**val, **values[key]}
                values[key] = merged
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
