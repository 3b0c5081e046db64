"""Tool auto-discovery"""

import importlib
import inspect
import logging
import pkgutil

from companion.core.tools.handler import ToolHandler
from companion.models.tools import ToolDefinition

from .decorators import get_tool_metadata, is_tool_function

logger = logging.getLogger(__name__)

BUILT_IN_PACKAGE = "companion.tools.built_in"


class ToolDiscovery:
    """Finds @tool-decorated functions in a package"""

    def __init__(self):
        self.discovered_tools: dict[str, tuple[ToolDefinition, ToolHandler]] = {}

    def discover_tools(
        self, module_paths: list[str]
    ) -> dict[str, tuple[ToolDefinition, ToolHandler]]:
        """
        Discover all tools from the given module paths.

        Args:
            module_paths: Packages or modules to scan

        Returns:
            Dictionary mapping tool names to (ToolDefinition, ToolHandler) tuples
        """
        self.discovered_tools.clear()

        for module_path in module_paths:
            self._discover_in_module(module_path)

        logger.info(
            f"Discovered {len(self.discovered_tools)} tools from {len(module_paths)} modules"
        )
        return self.discovered_tools.copy()

    def _discover_in_module(self, module_path: str) -> None:
        module = importlib.import_module(module_path)

        if hasattr(module, "__path__"):
            for _importer, modname, _ispkg in pkgutil.iter_modules(module.__path__):
                self._scan_module_for_tools(f"{module_path}.{modname}")
        else:
            self._scan_module_for_tools(module_path)

    def _scan_module_for_tools(self, module_path: str) -> None:
        """Scan a specific module for decorated tool functions"""
        module = importlib.import_module(module_path)

        for _name, obj in inspect.getmembers(module):
            if inspect.isfunction(obj) and is_tool_function(obj):
                tool_def, handler = get_tool_metadata(obj)

                if tool_def.name in self.discovered_tools:
                    logger.warning(
                        f"Duplicate tool name '{tool_def.name}' found in {module_path}"
                    )
                    continue

                self.discovered_tools[tool_def.name] = (tool_def, handler)
                logger.debug(f"Discovered tool '{tool_def.name}' in {module_path}")


def module_of(handler: ToolHandler) -> str:
    """Short built-in module name a handler's function lives in"""
    func = getattr(handler, "func", None)
    module_path = getattr(func, "__module__", "") or ""
    prefix = f"{BUILT_IN_PACKAGE}."
    if module_path.startswith(prefix):
        return module_path[len(prefix) :]
    return "unknown"


def discover_built_in_tools() -> dict[str, tuple[ToolDefinition, ToolHandler]]:
    """Discover all built-in tools"""
    return ToolDiscovery().discover_tools([BUILT_IN_PACKAGE])
