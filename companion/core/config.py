"""Configuration management and loading"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from companion.models.config import DEFAULT_MODEL_ID, CompanionConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration-related errors"""

    pass


class ConfigManager:
    """Manages configuration loading and validation"""

    DEFAULT_CONFIG_PATHS = [
        Path("companion-config.yaml"),
        Path("~/.companion/config.yaml"),
        Path("~/.config/companion/config.yaml"),
    ]

    def load_config(self, config_path: Path | None = None) -> CompanionConfig:
        """Load configuration from file or defaults"""

        if config_path:
            if not config_path.exists():
                raise ConfigError(f"Configuration file not found: {config_path}")
            return self._load_from_file(config_path)

        for path in self.DEFAULT_CONFIG_PATHS:
            expanded_path = Path(path).expanduser()
            if expanded_path.exists():
                return self._load_from_file(expanded_path)

        return self._load_default_config()

    def _load_from_file(self, config_path: Path) -> CompanionConfig:
        """Load configuration from YAML file"""
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error loading configuration from {config_path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid configuration in {config_path}: not a mapping")

        try:
            config = CompanionConfig(**self._apply_env_overrides(config_data))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}")

        logger.debug(f"Loaded configuration from {config_path}")
        return self._apply_model_fallback(config)

    def _load_default_config(self) -> CompanionConfig:
        """Load default configuration"""
        try:
            config = CompanionConfig(**self._apply_env_overrides({}))
        except ValidationError as e:
            raise ConfigError(f"Invalid environment configuration: {e}")
        return self._apply_model_fallback(config)

    def _apply_env_overrides(self, config_data: dict) -> dict:
        """Apply environment variable overrides"""

        api_data = dict(config_data.get("api") or {})

        api_key = os.getenv("COMPANION_API_KEY") or os.getenv("GEMINI_API_KEY")
        if api_key and not api_data.get("api_key"):
            api_data["api_key"] = api_key

        if os.getenv("COMPANION_BASE_URL"):
            api_data["base_url"] = os.getenv("COMPANION_BASE_URL")

        if api_data:
            config_data["api"] = api_data

        if os.getenv("COMPANION_MODEL"):
            config_data["selected_model"] = os.getenv("COMPANION_MODEL")

        return config_data

    def _apply_model_fallback(self, config: CompanionConfig) -> CompanionConfig:
        """Point an unknown or missing model selection at the default model"""
        if config.find_model(config.selected_model):
            return config

        fallback = config.get_selected_model()
        logger.warning(
            f"Selected model '{config.selected_model}' is not available, "
            f"using '{fallback.id if fallback else DEFAULT_MODEL_ID}'"
        )
        config.selected_model = fallback.id if fallback else None
        return config

    def save_config(self, config: CompanionConfig, config_path: Path) -> None:
        """Save configuration to file"""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json")

        # Keep API keys out of files on disk
        if config_dict["api"].get("api_key"):
            config_dict["api"]["api_key"] = None

        try:
            with open(config_path, "w") as f:
                f.write(
                    "# Set the API key via COMPANION_API_KEY or GEMINI_API_KEY\n"
                )
                yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Error saving configuration to {config_path}: {e}")


# Global config manager instance
config_manager = ConfigManager()
