"""
Unit tests for system/config.py - account simulator configuration.

Tests the configuration structure:
- AccountConfig: Seed values for new accounts
- PersistenceConfig: Store backend and debounce window
- LoggingConfig: Logging configuration
- SystemConfig: Container with load(), _from_dict(), merge, env substitution
- Singleton functions: get_system_config(), reload_system_config()
"""

from pathlib import Path

import pytest

from tradersim.system.config import (
    CONFIG_ENV_VAR,
    AccountConfig,
    LoggingConfig,
    PersistenceConfig,
    SystemConfig,
    _deep_merge,
    _substitute_env_vars,
    get_system_config,
    reload_system_config,
)


class TestAccountConfig:
    """Test AccountConfig dataclass."""

    def test_create_with_defaults(self):
        """Test AccountConfig seeds one billion cash and the default tree."""
        # Arrange & Act
        config = AccountConfig()

        # Assert
        assert config.initial_cash == "1000000000"
        assert config.tether_price == "60000"
        assert [p["id"] for p in config.seed_portfolios] == ["p-1", "p-2"]
        assert config.seed_portfolios[0]["children"][0]["id"] == "p-1-1"

    def test_default_seed_is_not_shared(self):
        """Test each AccountConfig gets its own seed list."""
        # Arrange
        first = AccountConfig()
        second = AccountConfig()

        # Act
        first.seed_portfolios.append({"id": "p-x", "name": "X"})

        # Assert
        assert len(second.seed_portfolios) == 2


class TestPersistenceConfig:
    """Test PersistenceConfig dataclass."""

    def test_create_with_defaults(self):
        """Test PersistenceConfig uses correct defaults."""
        # Arrange & Act
        config = PersistenceConfig()

        # Assert
        assert config.backend == "sqlite"
        assert config.path == "data/tradersim.db"
        assert config.cache_dir == "data/cache"
        assert config.debounce_seconds == 2.0
        assert config.account_id == "default"


class TestLoggingConfig:
    """Test LoggingConfig dataclass."""

    def test_create_with_defaults(self):
        """Test LoggingConfig uses correct defaults."""
        # Arrange & Act
        config = LoggingConfig()

        # Assert
        assert config.level == "INFO"
        assert config.format == "console"
        assert config.enable_file is True
        assert config.file_path == "logs/tradersim.log"
        assert config.file_level == "WARNING"

    def test_to_logger_config_converts_correctly(self):
        """Test to_logger_config() converts to log_system.LoggingConfig."""
        # Arrange
        config = LoggingConfig(level="DEBUG", format="json", file_path="logs/app.log")

        # Act
        logger_config = config.to_logger_config()

        # Assert
        assert logger_config.level == "DEBUG"
        assert logger_config.format == "json"
        assert logger_config.file_path == Path("logs/app.log")


class TestSystemConfig:
    """Test SystemConfig container and loading."""

    def test_create_with_defaults(self):
        """Test SystemConfig creates with default sub-configs."""
        # Arrange & Act
        config = SystemConfig()

        # Assert
        assert isinstance(config.account, AccountConfig)
        assert isinstance(config.persistence, PersistenceConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_load_missing_file_returns_defaults(self, tmp_path):
        """Test load() with a nonexistent path falls back to defaults."""
        # Arrange & Act
        config = SystemConfig.load(tmp_path / "missing.yaml")

        # Assert
        assert config.persistence.backend == "sqlite"

    def test_load_merges_partial_file_over_defaults(self, tmp_path):
        """Test a partial YAML file only overrides what it names."""
        # Arrange
        config_file = tmp_path / "tradersim.yaml"
        config_file.write_text(
            "persistence:\n"
            "  backend: json\n"
            "  debounce_seconds: 0.5\n"
            "account:\n"
            "  initial_cash: '5000'\n"
        )

        # Act
        config = SystemConfig.load(config_file)

        # Assert
        assert config.persistence.backend == "json"
        assert config.persistence.debounce_seconds == 0.5
        assert config.persistence.cache_dir == "data/cache"
        assert config.account.initial_cash == "5000"
        assert config.account.tether_price == "60000"
        assert config.logging.level == "INFO"

    def test_load_empty_file_returns_defaults(self, tmp_path):
        """Test an empty YAML document yields defaults."""
        # Arrange
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        # Act
        config = SystemConfig.load(config_file)

        # Assert
        assert config.account.initial_cash == "1000000000"

    def test_load_substitutes_environment_variables(self, tmp_path, monkeypatch):
        """Test ${VAR} placeholders are replaced from the environment."""
        # Arrange
        monkeypatch.setenv("TRADERSIM_DB", "/tmp/accounts.db")
        config_file = tmp_path / "tradersim.yaml"
        config_file.write_text("persistence:\n  path: ${TRADERSIM_DB}\n")

        # Act
        config = SystemConfig.load(config_file)

        # Assert
        assert config.persistence.path == "/tmp/accounts.db"

    def test_load_uses_env_var_path(self, tmp_path, monkeypatch):
        """Test $TRADERSIM_CONFIG selects the file when no path is given."""
        # Arrange
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("persistence:\n  account_id: alice\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        # Act
        config = SystemConfig.load()

        # Assert
        assert config.persistence.account_id == "alice"

    def test_load_uses_local_file(self, tmp_path, monkeypatch):
        """Test ./tradersim.yaml is used when no path or env var is set."""
        # Arrange
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "tradersim.yaml").write_text("logging:\n  level: DEBUG\n")

        # Act
        config = SystemConfig.load()

        # Assert
        assert config.logging.level == "DEBUG"

    def test_from_dict_rejects_unknown_keys(self):
        """Test unknown keys in a section are reported."""
        # Arrange & Act & Assert
        with pytest.raises(TypeError):
            SystemConfig._from_dict({"persistence": {"unknown": 1}})


class TestHelpers:
    """Test merge and substitution helpers."""

    def test_deep_merge_nested(self):
        """Test nested dictionaries merge key by key."""
        # Arrange
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 20}, "c": 4}

        # Act
        result = _deep_merge(base, override)

        # Assert
        assert result == {"a": {"x": 1, "y": 20}, "b": 3, "c": 4}
        assert base == {"a": {"x": 1, "y": 2}, "b": 3}

    def test_deep_merge_replaces_lists(self):
        """Test lists are replaced, not concatenated."""
        # Arrange & Act
        result = _deep_merge({"items": [1, 2]}, {"items": [3]})

        # Assert
        assert result == {"items": [3]}

    def test_substitute_keeps_undefined_variables(self, monkeypatch):
        """Test undefined variables stay as written."""
        # Arrange
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)

        # Act
        result = _substitute_env_vars({"path": "${NOT_SET_ANYWHERE}/db", "n": 5, "l": ["${NOT_SET_ANYWHERE}"]})

        # Assert
        assert result == {"path": "${NOT_SET_ANYWHERE}/db", "n": 5, "l": ["${NOT_SET_ANYWHERE}"]}


class TestSingleton:
    """Test cached system config access."""

    def test_get_system_config_is_cached(self, tmp_path, monkeypatch):
        """Test repeated calls return the same instance."""
        # Arrange
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        reload_system_config()

        # Act
        first = get_system_config()
        second = get_system_config()

        # Assert
        assert first is second

    def test_reload_replaces_instance(self, tmp_path):
        """Test reload_system_config() reads the file again."""
        # Arrange
        config_file = tmp_path / "tradersim.yaml"
        config_file.write_text("persistence:\n  account_id: one\n")
        first = reload_system_config(config_file)
        config_file.write_text("persistence:\n  account_id: two\n")

        # Act
        second = reload_system_config(config_file)

        # Assert
        assert first.persistence.account_id == "one"
        assert second.persistence.account_id == "two"
        assert get_system_config() is second
