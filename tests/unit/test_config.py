"""Tests for configuration management"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from companion.core.config import ConfigError, ConfigManager
from companion.models.config import (
    DEFAULT_MODEL_ID,
    CompanionConfig,
    MonitoringConfig,
    ToolsConfig,
)


@pytest.fixture
def manager(monkeypatch, temp_dir):
    """ConfigManager that does not see any real config file"""
    monkeypatch.setattr(
        ConfigManager, "DEFAULT_CONFIG_PATHS", [temp_dir / "missing.yaml"]
    )
    return ConfigManager()


class TestConfigModels:
    """Test configuration model defaults and validation"""

    def test_defaults(self):
        config = CompanionConfig()

        assert config.selected_model == DEFAULT_MODEL_ID
        assert config.api.base_url.endswith("/v1beta")
        assert config.api.api_key is None
        assert config.chat.max_image_bytes == 4 * 1024 * 1024
        assert config.tools.enabled_built_in_modules == ["browser_tools"]
        assert {m.id for m in config.models} == {"gemini-1.5-pro", DEFAULT_MODEL_ID}

    def test_get_selected_model_falls_back(self):
        config = CompanionConfig(selected_model="gemini-0-nonexistent")
        assert config.get_selected_model().id == DEFAULT_MODEL_ID

    def test_log_level_normalized(self):
        assert MonitoringConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            MonitoringConfig(log_level="LOUD")

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            ToolsConfig(execution_timeout=0)

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            CompanionConfig(profiles={})


class TestConfigManager:
    """Test ConfigManager loading and saving"""

    def test_load_default_config(self, manager, clean_env):
        """Test loading default configuration when no file exists"""
        config = manager.load_config()

        assert isinstance(config, CompanionConfig)
        assert config.selected_model == DEFAULT_MODEL_ID
        assert config.api.api_key is None

    def test_load_from_yaml(self, manager, clean_env, sample_config_yaml):
        """Test loading configuration from a YAML file"""
        config = manager.load_config(sample_config_yaml)

        assert config.api.api_key == "file-api-key"
        assert config.api.request_timeout == 30
        assert config.selected_model == "gemini-1.5-pro"
        assert config.chat.max_history_length == 25
        assert config.monitoring.log_level == "INFO"

    def test_missing_explicit_file(self, manager, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            manager.load_config(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, manager, temp_dir):
        config_path = temp_dir / "broken.yaml"
        config_path.write_text("api: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            manager.load_config(config_path)

    def test_non_mapping_yaml(self, manager, temp_dir):
        config_path = temp_dir / "list.yaml"
        config_path.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="not a mapping"):
            manager.load_config(config_path)

    def test_invalid_values(self, manager, clean_env, temp_dir):
        config_path = temp_dir / "bad.yaml"
        config_path.write_text("chat:\n  max_history_length: -1\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            manager.load_config(config_path)

    def test_env_api_key(self, manager, clean_env, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        assert manager.load_config().api.api_key == "env-key"

    def test_companion_key_preferred(self, manager, clean_env, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        monkeypatch.setenv("COMPANION_API_KEY", "companion-key")
        assert manager.load_config().api.api_key == "companion-key"

    def test_file_key_wins_over_env(
        self, manager, clean_env, monkeypatch, sample_config_yaml
    ):
        """Test environment keys only fill in a missing key"""
        monkeypatch.setenv("COMPANION_API_KEY", "env-key")
        assert manager.load_config(sample_config_yaml).api.api_key == "file-api-key"

    def test_env_model_and_base_url(self, manager, clean_env, monkeypatch):
        monkeypatch.setenv("COMPANION_MODEL", "gemini-1.5-pro")
        monkeypatch.setenv("COMPANION_BASE_URL", "https://proxy.test/v1beta")

        config = manager.load_config()

        assert config.selected_model == "gemini-1.5-pro"
        assert config.api.base_url == "https://proxy.test/v1beta"

    def test_unknown_model_falls_back(self, manager, clean_env, temp_dir):
        """Test an unknown selection is replaced by the default model"""
        config_path = temp_dir / "config.yaml"
        config_path.write_text("selected_model: gemini-0-nonexistent\n")

        config = manager.load_config(config_path)

        assert config.selected_model == DEFAULT_MODEL_ID

    def test_save_config_omits_key(self, manager, clean_env, temp_dir):
        """Test saved files never contain the API key"""
        config = CompanionConfig()
        config.api.api_key = "secret-key"
        config_path = temp_dir / "nested" / "config.yaml"

        manager.save_config(config, config_path)

        text = config_path.read_text()
        assert "secret-key" not in text
        saved = yaml.safe_load(text)
        assert saved["api"]["api_key"] is None
        assert saved["selected_model"] == DEFAULT_MODEL_ID

    def test_saved_config_loads_back(self, manager, clean_env, temp_dir):
        config_path = temp_dir / "config.yaml"
        manager.save_config(CompanionConfig(selected_model="gemini-1.5-pro"), config_path)

        assert manager.load_config(Path(config_path)).selected_model == "gemini-1.5-pro"
