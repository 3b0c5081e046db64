"""Tool registry: declarations exposed to the model and their handlers"""

import asyncio
import logging
import time
from typing import Any

from companion.models.config import ToolsConfig
from companion.models.tools import (
    ExecutionContext,
    ToolDefinition,
    ToolNotFoundError,
)

from .handler import ToolHandler

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Fixed capability table mapping tool names to handlers.

    Built once at startup (``register_tool`` calls or ``initialize``) and then
    frozen. The registry is passed explicitly to whatever needs it; there is
    no module-level instance.
    """

    def __init__(self, config: ToolsConfig | None = None):
        self.config = config or ToolsConfig()
        self.tools: dict[str, ToolDefinition] = {}
        self.handlers: dict[str, ToolHandler] = {}
        self._frozen = False

        # Statistics
        self.execution_stats = {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "total_execution_time": 0,
        }

    def initialize(self) -> "ToolRegistry":
        """Register tools from the enabled built-in modules and freeze"""
        logger.info("Initializing tool registry")

        if self.config.enabled:
            self._register_built_in_tools()
        else:
            logger.info("Function calling disabled, no tools registered")

        self.freeze()
        logger.info(f"Tool registry initialized with {len(self.tools)} tools")
        return self

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register_tool(self, tool: ToolDefinition, handler: ToolHandler) -> None:
        """Register a tool with its handler"""

        if self._frozen:
            raise RuntimeError("Tool registry is frozen after initialization")

        if tool.name in self.tools:
            logger.warning(f"Overriding existing tool: {tool.name}")

        self.tools[tool.name] = tool
        self.handlers[tool.name] = handler

        logger.debug(f"Registered tool: {tool.name}")

    def get_function_declarations(self) -> list[dict[str, Any]]:
        """Declarations for every enabled tool, in registration order"""
        return [
            tool.to_function_declaration()
            for tool in self.tools.values()
            if tool.enabled
        ]

    async def execute_tool(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        context: ExecutionContext | None = None,
    ) -> str:
        """Run a tool and return its text result.

        Raises ``ToolNotFoundError`` for names that are not registered. Every
        other failure, including missing arguments, handler exceptions and
        timeouts, comes back as a descriptive string.
        """

        tool = self.tools.get(tool_name)
        if tool is None or not tool.enabled:
            error_msg = f"Unknown tool requested by model: {tool_name}"
            logger.error(error_msg)
            raise ToolNotFoundError(error_msg)

        handler = self.handlers[tool_name]
        self.execution_stats["total_calls"] += 1

        missing = handler.missing_arguments(arguments, tool.required_arguments)
        if missing:
            self.execution_stats["failed_calls"] += 1
            logger.warning(f"Tool '{tool_name}' called without {missing}")
            return (
                f"Missing required argument(s) for tool '{tool_name}': "
                f"{', '.join(missing)}"
            )

        start_time = time.time()
        try:
            result = await asyncio.wait_for(
                handler.execute(arguments, context or ExecutionContext()),
                timeout=self.config.execution_timeout,
            )

            execution_time = int((time.time() - start_time) * 1000)
            self.execution_stats["successful_calls"] += 1
            self.execution_stats["total_execution_time"] += execution_time

            logger.debug(
                f"Tool '{tool_name}' executed successfully in {execution_time}ms"
            )
            return "" if result is None else str(result)

        except TimeoutError:
            self.execution_stats["failed_calls"] += 1
            logger.error(
                f"Tool '{tool_name}' timed out after {self.config.execution_timeout}s"
            )
            return (
                f"Tool '{tool_name}' timed out after {self.config.execution_timeout}s"
            )

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            self.execution_stats["failed_calls"] += 1
            logger.error(f"Tool '{tool_name}' failed after {execution_time}ms: {e}")
            return f"Tool '{tool_name}' failed: {e}"

    def get_tool_info(self, tool_name: str) -> ToolDefinition | None:
        """Get information about a specific tool"""
        return self.tools.get(tool_name)

    def list_tool_names(self) -> list[str]:
        return [name for name, tool in self.tools.items() if tool.enabled]

    def get_execution_stats(self) -> dict:
        """Get execution statistics"""
        stats = self.execution_stats.copy()

        total_calls = stats["total_calls"]
        if total_calls > 0:
            stats["success_rate"] = stats["successful_calls"] / total_calls
            stats["average_execution_time"] = (
                stats["total_execution_time"] / total_calls
            )
        else:
            stats["success_rate"] = 0
            stats["average_execution_time"] = 0

        stats["registered_tools"] = len(self.tools)
        return stats

    def _register_built_in_tools(self) -> None:
        """Register built-in tools from the enabled modules"""
        from companion.tools.registry import discover_built_in_tools, module_of

        discovered_tools = discover_built_in_tools()
        enabled_modules = self.config.enabled_built_in_modules

        registered_count = 0
        for tool_name, (tool_def, handler) in discovered_tools.items():
            tool_module = module_of(handler)
            if tool_module in enabled_modules:
                self.register_tool(tool_def, handler)
                registered_count += 1
            else:
                logger.debug(f"Skipping disabled tool: {tool_name} from {tool_module}")

        logger.info(
            f"Registered {registered_count} built-in tools from "
            f"{len(enabled_modules)} enabled modules"
        )
