"""Gemini generateContent request and response models"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_CIVIC_INTEGRITY",
)

# Policy constant: every category is left unfiltered
SAFETY_SETTINGS: tuple[dict[str, str], ...] = tuple(
    {"category": category, "threshold": "BLOCK_NONE"} for category in HARM_CATEGORIES
)


class ImageData(BaseModel):
    """Inline image payload"""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(description="Image MIME type, e.g. image/png")
    base64_data: str = Field(description="Base64-encoded image bytes")

    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageData":
        """Parse a ``data:<mime>;base64,<payload>`` URL"""
        header, sep, payload = data_url.partition(",")
        if not sep or not header.startswith("data:") or ";base64" not in header:
            raise ValueError("Not a base64 data URL")
        mime_type = header[len("data:") :].split(";")[0] or "image/png"
        return cls(mime_type=mime_type, base64_data=payload)

    def to_part(self) -> dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.base64_data}}


class GenerateContentRequest(BaseModel):
    """A single generateContent call"""

    model_config = ConfigDict(frozen=True)

    model_id: str
    message: str
    image: ImageData | None = None
    safety_settings: tuple[dict[str, str], ...] = SAFETY_SETTINGS
    function_declarations: tuple[dict[str, Any], ...] | None = None

    @model_validator(mode="after")
    def check_tools_exclusive_with_image(self) -> "GenerateContentRequest":
        if self.image is not None and self.function_declarations is not None:
            raise ValueError("Tool declarations cannot accompany an inline image")
        return self

    @property
    def has_tools(self) -> bool:
        return self.function_declarations is not None

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body for the API"""
        parts: list[dict[str, Any]] = []
        if self.image is not None:
            parts.append(self.image.to_part())
        parts.append({"text": self.message})

        payload: dict[str, Any] = {
            "contents": [{"parts": parts}],
            "safetySettings": [dict(setting) for setting in self.safety_settings],
        }

        if self.function_declarations is not None:
            payload["tools"] = [
                {"functionDeclarations": list(self.function_declarations)}
            ]
            payload["toolConfig"] = {"functionCallingConfig": {"mode": "AUTO"}}

        return payload


class FunctionCall(BaseModel):
    """A tool invocation requested by the model"""

    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class ModelReply(BaseModel):
    """First part of the model's first candidate: text or a function call"""

    text: str | None = None
    function_call: FunctionCall | None = None

    @property
    def is_function_call(self) -> bool:
        return self.function_call is not None
