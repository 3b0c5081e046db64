"""Request orchestration: build, send, dispatch"""

import functools
import logging

from companion.core.ai_client import GeminiClient
from companion.core.browser import BrowserPlatform
from companion.core.dispatcher import ResponseDispatcher
from companion.core.request_builder import RequestBuilder
from companion.core.tools.registry import ToolRegistry
from companion.models.config import CompanionConfig
from companion.models.gemini import ImageData
from companion.models.tools import ExecutionContext

logger = logging.getLogger(__name__)

# Requests at this depth or deeper are sent without tool declarations
MAX_TOOL_DEPTH = 1


class RequestPipeline:
    """message -> RequestBuilder -> GeminiClient -> ResponseDispatcher -> text"""

    def __init__(
        self,
        config: CompanionConfig,
        registry: ToolRegistry,
        client: GeminiClient,
        platform: BrowserPlatform | None = None,
    ):
        self.config = config
        self.registry = registry
        self.client = client
        self.platform = platform
        self.builder = RequestBuilder(config, registry)
        self.dispatcher = ResponseDispatcher(registry)

    async def ask(
        self,
        message: str,
        image: ImageData | None = None,
        *,
        allow_tools: bool = True,
        depth: int = 0,
    ) -> str:
        """Run one exchange and return the final text.

        Raises AIError subclasses for precondition, transport and format
        failures and ToolError for unknown or disallowed tool calls. ``depth``
        is 0 for a user message and grows by one for each nested request a
        tool handler makes.
        """
        allow_tools = allow_tools and depth < MAX_TOOL_DEPTH
        request = self.builder.build(message, image, allow_tools=allow_tools)
        data = await self.client.generate_content(request)

        context = ExecutionContext(
            platform=self.platform,
            ask_model=functools.partial(self.ask, depth=depth + 1),
            depth=depth,
        )
        return await self.dispatcher.dispatch(
            data, context, tools_declared=request.has_tools
        )

    async def close(self) -> None:
        await self.client.close()
