"""
System configuration for tradersim.

One configuration for the entire account simulator:
- AccountConfig: seed values used when an account is initialized
- PersistenceConfig: which store backs the account and how saves are debounced
- LoggingConfig: logging configuration (converted to log_system.LoggingConfig)

Loading order when no explicit path is given:
1. $TRADERSIM_CONFIG
2. ./tradersim.yaml
3. Built-in defaults

Values may reference environment variables as ${VAR}.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from tradersim.system import log_system

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

DEFAULT_CONFIG_FILENAME = "tradersim.yaml"
CONFIG_ENV_VAR = "TRADERSIM_CONFIG"


def _default_seed_portfolios() -> list[dict[str, Any]]:
    return [
        {
            "id": "p-1",
            "name": "Equities",
            "allocation": "300000000",
            "children": [
                {"id": "p-1-1", "name": "Equity Funds", "allocation": "100000000"},
            ],
        },
        {"id": "p-2", "name": "Gold & Coins", "allocation": "200000000"},
    ]


@dataclass
class AccountConfig:
    """Seed values for a freshly initialized account."""

    initial_cash: str = "1000000000"
    tether_price: str = "60000"
    seed_portfolios: list[dict[str, Any]] = field(default_factory=_default_seed_portfolios)


@dataclass
class PersistenceConfig:
    """Where account snapshots live.

    Attributes:
        backend: Remote store kind (memory, json, sqlite)
        path: Directory (json) or database file (sqlite) of the remote store
        cache_dir: Directory of the local cache copy (always a JSON store)
        debounce_seconds: Quiet window before a remote save fires
        account_id: Account key used by the CLI
    """

    backend: Literal["memory", "json", "sqlite"] = "sqlite"
    path: str = "data/tradersim.db"
    cache_dir: str = "data/cache"
    debounce_seconds: float = 2.0
    account_id: str = "default"


@dataclass
class LoggingConfig:
    """Logging section of the system configuration."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = True
    file_path: str = "logs/tradersim.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> log_system.LoggingConfig:
        """Convert to the pydantic model consumed by LoggerFactory."""
        return log_system.LoggingConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    account: AccountConfig = field(default_factory=AccountConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, merged over built-in defaults.

        Args:
            path: Explicit config file. If None, uses $TRADERSIM_CONFIG or
                ./tradersim.yaml when present.

        Returns:
            SystemConfig (defaults when no file exists)
        """
        config_path = cls._resolve_path(path)
        if config_path is None or not config_path.exists():
            return cls()

        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        merged = _deep_merge(_defaults_as_dict(), raw)
        return cls._from_dict(_substitute_env_vars(merged))

    @staticmethod
    def _resolve_path(path: Path | str | None) -> Path | None:
        if path is not None:
            return Path(path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        local = Path(DEFAULT_CONFIG_FILENAME)
        return local if local.exists() else None

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        return cls(
            account=AccountConfig(**(data.get("account") or {})),
            persistence=PersistenceConfig(**(data.get("persistence") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
        )


def _defaults_as_dict() -> dict[str, Any]:
    defaults = SystemConfig()
    return {
        "account": dict(defaults.account.__dict__),
        "persistence": dict(defaults.persistence.__dict__),
        "logging": dict(defaults.logging.__dict__),
    }


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base (override wins)."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} placeholders in strings; undefined variables are kept."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """Get the cached system config (an explicit path always reloads)."""
    global _system_config
    if path is not None:
        _system_config = SystemConfig.load(path)
    elif _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system config."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
