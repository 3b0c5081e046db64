"""Gemini generateContent HTTP client"""

import copy
import json
import logging
from typing import Any

import httpx

from companion.models.config import APIConfig
from companion.models.gemini import GenerateContentRequest

logger = logging.getLogger(__name__)


class AIError(Exception):
    """Base exception for AI-related errors"""

    pass


class AIRateLimitError(AIError):
    """Raised when API rate limit is exceeded"""

    pass


class AIAuthenticationError(AIError):
    """Raised when the API key is missing or rejected"""

    pass


class AIModelNotFoundError(AIError):
    """Raised when no model is selected or the API does not know it"""

    pass


class AIResponseFormatError(AIError):
    """Raised when a response lacks the expected fields"""

    def __init__(self, message: str = "Invalid response format from API"):
        super().__init__(message)


class GeminiClient:
    """Sends generateContent requests; no retries, no backoff"""

    def __init__(
        self, config: APIConfig, http_client: httpx.AsyncClient | None = None
    ):
        self.config = config
        self._client = http_client or httpx.AsyncClient(
            timeout=config.request_timeout
        )

    def validate_config(self) -> bool:
        """Check that an API key is configured"""
        if not self.config.api_key:
            logger.warning("Gemini API key not provided")
            return False
        return True

    def endpoint(self, model_id: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/models/{model_id}:generateContent"

    async def generate_content(self, request: GenerateContentRequest) -> dict:
        """POST the request and return the decoded JSON body"""
        if not self.config.api_key:
            raise AIAuthenticationError("Please set your API key in settings")

        payload = request.to_payload()
        logger.debug(
            f"GEMINI_REQUEST {request.model_id}: "
            f"{json.dumps(redact_payload(payload), default=str)}"
        )

        try:
            response = await self._client.post(
                self.endpoint(request.model_id),
                params={"key": self.config.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AIError(f"Gemini API request failed: {e}") from e

        if response.is_error:
            self._handle_api_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise AIResponseFormatError() from e

        logger.debug(f"GEMINI_RESPONSE {request.model_id}: {json.dumps(data)}")
        return data

    def _handle_api_error(self, response: httpx.Response) -> None:
        """Convert an error status into our standard errors, body as message"""
        error_text = response.text
        status = response.status_code
        logger.error(f"Gemini API returned {status}")

        if status == 429:
            raise AIRateLimitError(error_text)
        elif status in (401, 403):
            raise AIAuthenticationError(error_text)
        elif status == 404:
            raise AIModelNotFoundError(error_text)
        else:
            raise AIError(error_text)

    async def close(self) -> None:
        await self._client.aclose()


def redact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of a request payload with inline image data elided for logging"""
    redacted = copy.deepcopy(payload)
    for content in redacted.get("contents", []):
        for part in content.get("parts", []):
            inline = part.get("inline_data")
            if inline and "data" in inline:
                inline["data"] = f"<{len(inline['data'])} base64 chars>"
    return redacted
