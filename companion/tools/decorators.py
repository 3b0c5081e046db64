"""Tool decorator system for declaring browser tools"""

import asyncio
import functools
import inspect
from collections.abc import Callable
from typing import Any, get_origin, get_type_hints

from companion.core.tools.handler import ToolHandler
from companion.models.tools import (
    ExecutionContext,
    ToolCategory,
    ToolDefinition,
    ToolExample,
)

# Parameter name through which handlers receive the ExecutionContext
CONTEXT_PARAM = "context"


class DecoratedToolHandler(ToolHandler):
    """Handler for decorator-defined tools"""

    def __init__(self, func: Callable, metadata: dict):
        self.func = func
        self.metadata = metadata

    async def execute(
        self, arguments: dict[str, Any], context: ExecutionContext = None
    ) -> str:
        """Call the decorated function with the matching arguments"""
        sig = inspect.signature(self.func)
        call_args = {}

        for param_name in sig.parameters:
            if param_name == CONTEXT_PARAM:
                call_args[param_name] = context or ExecutionContext()
            elif param_name in arguments:
                call_args[param_name] = arguments[param_name]

        if inspect.iscoroutinefunction(self.func):
            return await self.func(**call_args)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.func, **call_args)
        )


def _generate_json_schema(func: Callable) -> dict:
    """Generate JSON schema from function signature and type hints"""
    sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    properties = {}
    required = []

    for param_name, param in sig.parameters.items():
        if param_name == CONTEXT_PARAM:
            continue

        param_type = type_hints.get(param_name, Any)
        param_schema = {"type": _python_type_to_json_type(param_type)}

        if func.__doc__:
            param_desc = _extract_param_description(func.__doc__, param_name)
            if param_desc:
                param_schema["description"] = param_desc

        # Gemini's schema subset has no "default" keyword
        if param.default is param.empty:
            required.append(param_name)

        properties[param_name] = param_schema

    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


# JSON schema type per Python annotation; anything else is sent as a string
JSON_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def _python_type_to_json_type(python_type) -> str:
    """Convert Python type to JSON schema type"""
    return JSON_TYPES.get(get_origin(python_type) or python_type, "string")


def _extract_param_description(docstring: str, param_name: str) -> str | None:
    """Extract parameter description from an ``Args:`` docstring section.

    Accepts both ``name: text`` and ``name (type): text`` entries.
    """
    in_args = False
    for raw_line in docstring.splitlines():
        line = raw_line.strip()
        header = line.lower()

        if header in ("args:", "parameters:"):
            in_args = True
            continue
        if not in_args:
            continue
        if header in ("returns:", "yields:", "raises:", "example:"):
            break

        key, sep, text = line.partition(":")
        if sep and key.split(" (")[0].strip() == param_name:
            return text.strip()

    return None


def tool(
    name: str = None,
    description: str = None,
    category: ToolCategory = ToolCategory.GENERAL,
    tags: list[str] | None = None,
    examples: list[ToolExample] | None = None,
) -> Callable:
    """
    Decorator to declare a function as a model-callable tool.

    A parameter named ``context`` receives the ExecutionContext and is left out
    of the generated schema.

    Args:
        name: Tool name as seen by the model (defaults to function name)
        description: Tool description (defaults to first docstring line)
        category: Tool category for organization
        tags: List of tags for searching/filtering
        examples: List of usage examples

    Returns:
        The decorated function, unchanged but carrying its tool metadata

    Example:
        @tool(name="openTab", category=ToolCategory.NAVIGATION)
        async def open_tab(url: str, context: ExecutionContext) -> str:
            '''Opens a new browser tab.

            Args:
                url: The URL to open in the new tab
            '''
    """

    def decorator(func: Callable) -> Callable:
        tool_name = name or func.__name__
        tool_description = description or (
            func.__doc__.strip().split("\n")[0]
            if func.__doc__
            else f"Execute {func.__name__}"
        )
        tool_tags = tags or []
        tool_examples = examples or []

        tool_def = ToolDefinition(
            name=tool_name,
            description=tool_description,
            parameters=_generate_json_schema(func),
            category=category,
            tags=tool_tags,
            examples=tool_examples,
        )

        handler = DecoratedToolHandler(
            func,
            {
                "name": tool_name,
                "description": tool_description,
                "category": category,
                "tags": tool_tags,
            },
        )

        # Store metadata on function for auto-discovery
        func._tool_definition = tool_def
        func._tool_handler = handler
        func._is_tool = True

        return func

    return decorator


def get_tool_metadata(func: Callable) -> tuple[ToolDefinition, ToolHandler]:
    """Get tool definition and handler from a decorated function"""
    if not is_tool_function(func):
        raise ValueError(f"Function {func.__name__} is not decorated with @tool")

    return func._tool_definition, func._tool_handler


def is_tool_function(func: Callable) -> bool:
    """Check if a function is decorated with @tool"""
    return getattr(func, "_is_tool", False) is True
