"""Companion Tools Package

Browser-side tools the model can request through function calling. Tools are
plain functions declared with the ``@tool`` decorator; the registry finds them
in ``companion.tools.built_in`` at startup.
"""

from .decorators import tool
from .registry import ToolDiscovery, discover_built_in_tools

__all__ = [
    "tool",
    "ToolDiscovery",
    "discover_built_in_tools",
]
