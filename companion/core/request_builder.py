"""Builds generateContent requests from user messages"""

import logging

from companion.core.ai_client import AIAuthenticationError, AIModelNotFoundError
from companion.core.tools.registry import ToolRegistry
from companion.models.config import CompanionConfig
from companion.models.gemini import GenerateContentRequest, ImageData

logger = logging.getLogger(__name__)


class RequestBuilder:
    """Assembles a request from a message, an optional image and the tools.

    Tool declarations and inline images never share a request. Nested
    requests pass ``allow_tools=False`` so a tool cannot trigger further
    tool calls.
    """

    def __init__(self, config: CompanionConfig, registry: ToolRegistry):
        self.config = config
        self.registry = registry

    def build(
        self,
        message: str,
        image: ImageData | None = None,
        *,
        allow_tools: bool = True,
    ) -> GenerateContentRequest:
        if not self.config.api.api_key:
            raise AIAuthenticationError("Please set your API key in settings")

        model = self.config.find_model(self.config.selected_model)
        if model is None:
            raise AIModelNotFoundError("Selected model not found")

        declarations = None
        if image is None and allow_tools:
            # An empty declaration list is rejected by the API
            declarations = tuple(self.registry.get_function_declarations()) or None

        logger.debug(
            f"Built request for {model.id}: image={image is not None}, "
            f"tools={len(declarations) if declarations is not None else 0}"
        )

        return GenerateContentRequest(
            model_id=model.id,
            message=message,
            image=image,
            function_declarations=declarations,
        )
