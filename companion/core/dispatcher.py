"""Turns a generateContent response into the text shown to the user"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from companion.core.ai_client import AIResponseFormatError
from companion.core.tools.registry import ToolRegistry
from companion.models.gemini import FunctionCall, ModelReply
from companion.models.tools import ExecutionContext, ToolError

logger = logging.getLogger(__name__)


def decode_arguments(raw_args: Any) -> dict[str, Any]:
    """Accept function-call args as a mapping, a JSON string, or nothing"""
    if raw_args is None or raw_args == "":
        return {}

    if isinstance(raw_args, str):
        try:
            raw_args = json.loads(raw_args)
        except json.JSONDecodeError as e:
            raise AIResponseFormatError(
                f"Invalid response format from API: bad function arguments ({e})"
            ) from e

    if not isinstance(raw_args, Mapping):
        raise AIResponseFormatError(
            "Invalid response format from API: function arguments are not an object"
        )
    return dict(raw_args)


class ResponseDispatcher:
    """Reads the first part of the first candidate and acts on it"""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def parse(self, data: Any) -> ModelReply:
        """Extract ``candidates[0].content.parts[0]``; anything further is ignored"""
        try:
            part = data["candidates"][0]["content"]["parts"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise AIResponseFormatError() from e

        if not isinstance(part, Mapping):
            raise AIResponseFormatError()

        function_call = part.get("functionCall")
        if function_call:
            name = function_call.get("name") if isinstance(function_call, Mapping) else None
            if not name:
                raise AIResponseFormatError(
                    "Invalid response format from API: function call without a name"
                )
            return ModelReply(
                function_call=FunctionCall(
                    name=name, args=decode_arguments(function_call.get("args"))
                )
            )

        if "text" in part and isinstance(part["text"], str):
            return ModelReply(text=part["text"])

        raise AIResponseFormatError()

    async def dispatch(
        self,
        data: Any,
        context: ExecutionContext | None = None,
        *,
        tools_declared: bool = True,
    ) -> str:
        """Return the reply text, running the requested tool when there is one.

        Unknown tool names raise ``ToolNotFoundError`` from the registry rather
        than being dropped. A function call in reply to a request that
        declared no tools raises ``ToolError``.
        """
        reply = self.parse(data)

        if not reply.is_function_call:
            return reply.text

        call = reply.function_call
        if not tools_declared:
            raise ToolError(
                f"Model requested tool '{call.name}' in a request without tools"
            )

        depth = context.depth if context else 0
        logger.info(f"Model requested tool: {call.name} (depth {depth})")
        return await self.registry.execute_tool(call.name, call.args, context)
