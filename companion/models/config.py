"""Configuration models and schemas"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL_ID = "gemini-1.5-flash-8b"


class ModelInfo(BaseModel):
    """A selectable Gemini model"""

    id: str = Field(description="Model identifier used in the API path")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="Short model description")
    max_tokens: int = Field(default=30720, description="Context size", gt=0)
    temperature: float = Field(
        default=0.7, description="Suggested temperature", ge=0.0, le=2.0
    )
    type: str = Field(default="text", description="Model type")


def default_models() -> list[ModelInfo]:
    """Models offered when the configuration does not list any"""
    return [
        ModelInfo(
            id="gemini-1.5-pro",
            name="Gemini 1.5 Pro",
            description="Most capable model for complex tasks",
        ),
        ModelInfo(
            id=DEFAULT_MODEL_ID,
            name="Gemini 1.5 Flash-8B",
            description="Fast, efficient model with tool support",
        ),
    ]


class APIConfig(BaseModel):
    """Gemini API connection settings"""

    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative Language API base URL",
    )
    api_key: str | None = Field(default=None, description="Gemini API key")
    request_timeout: float = Field(
        default=60.0, description="HTTP timeout in seconds", gt=0
    )


class ChatConfig(BaseModel):
    """Configuration for chat behavior"""

    max_history_length: int = Field(
        default=50, description="Maximum messages to keep in memory", gt=0
    )
    max_image_bytes: int = Field(
        default=4 * 1024 * 1024, description="Maximum attached image size", gt=0
    )
    state_file: str = Field(
        default="~/.companion/state.yaml",
        description="Saved messages and model selection",
    )
    auto_save: bool = Field(
        default=True, description="Save messages and model selection between runs"
    )


class ToolsConfig(BaseModel):
    """Tools and function calling configuration"""

    enabled: bool = Field(default=True, description="Enable function calling")
    enabled_built_in_modules: list[str] = Field(
        default_factory=lambda: ["browser_tools"],
        description="Enabled built-in tool modules",
    )
    execution_timeout: float | None = Field(
        default=None, description="Tool execution timeout (seconds), None for none"
    )

    @field_validator("execution_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Execution timeout must be positive")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging"""

    log_level: str = Field(default="WARNING", description="Root log level")
    debug_log_file: str | None = Field(
        default=None, description="Optional file receiving DEBUG logs"
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {', '.join(allowed_levels)}")
        return v.upper()


class CompanionConfig(BaseModel):
    """Main configuration model"""

    model_config = ConfigDict(extra="forbid")

    api: APIConfig = Field(default_factory=APIConfig)
    models: list[ModelInfo] = Field(default_factory=default_models)
    selected_model: str | None = Field(
        default=DEFAULT_MODEL_ID, description="Currently selected model id"
    )
    chat: ChatConfig = Field(default_factory=ChatConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    def find_model(self, model_id: str | None) -> ModelInfo | None:
        """Look up a configured model by id"""
        if not model_id:
            return None
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def get_selected_model(self) -> ModelInfo | None:
        """Get the selected model, falling back to the default model"""
        model = self.find_model(self.selected_model)
        if model:
            return model
        return self.find_model(DEFAULT_MODEL_ID)


def expand_path(path: str | None) -> Path | None:
    """Expand a user path from configuration"""
    return Path(path).expanduser() if path else None
