"""Tools and function calling core module"""

from .handler import ToolHandler
from .registry import ToolRegistry

__all__ = ["ToolHandler", "ToolRegistry"]
