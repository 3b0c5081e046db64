"""Tools and function calling models"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolCategory(str, Enum):
    """Categories for organizing tools"""

    NAVIGATION = "navigation"
    PAGE = "page"
    CLIPBOARD = "clipboard"
    VISION = "vision"
    GENERAL = "general"


class ToolExample(BaseModel):
    """Example usage of a tool"""

    description: str = Field(description="Description of the example")
    arguments: dict[str, Any] = Field(description="Example arguments")
    expected_result: str | None = Field(
        default=None, description="Expected result description"
    )


class ToolDefinition(BaseModel):
    """Tool declaration exposed to the model"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Tool name, unique within a registry")
    description: str = Field(description="Tool description")
    parameters: dict[str, Any] = Field(description="JSON Schema for parameters")
    category: ToolCategory = Field(default=ToolCategory.GENERAL)
    tags: list[str] = Field(default_factory=list)
    examples: list[ToolExample] = Field(default_factory=list)
    enabled: bool = Field(default=True, description="Whether tool is enabled")

    @property
    def required_arguments(self) -> list[str]:
        return list(self.parameters.get("required", []))

    def to_function_declaration(self) -> dict[str, Any]:
        """Convert to a Gemini function declaration"""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


class ExecutionContext(BaseModel):
    """Context handed to tool handlers"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # BrowserPlatform instance; typed loosely to keep models free of core imports
    platform: Any = None
    # Nested request callback: (prompt, image) -> reply text, tools disabled
    ask_model: Callable[..., Awaitable[str]] | None = None
    # 0 for a user message, 1 inside a nested request
    depth: int = 0


# Exceptions
class ToolError(Exception):
    """Base exception for tool-related errors"""

    pass


class ToolNotFoundError(ToolError):
    """Raised when the model requests a tool that is not registered"""

    pass

