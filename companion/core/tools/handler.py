"""Base tool handler interface"""

from abc import ABC, abstractmethod
from typing import Any

from companion.models.tools import ExecutionContext


class ToolHandler(ABC):
    """Abstract base class for tool handlers"""

    @abstractmethod
    async def execute(
        self, arguments: dict[str, Any], context: ExecutionContext = None
    ) -> str:
        """Execute the tool with given arguments and return its text result"""
        pass

    def missing_arguments(
        self, arguments: dict[str, Any], required: list[str]
    ) -> list[str]:
        """Names from ``required`` that are absent or null in ``arguments``

        An empty string is a value: ``copyToClipboard`` may copy ``""``.
        """
        return [name for name in required if arguments.get(name) is None]
