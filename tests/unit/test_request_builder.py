"""Tests for request construction"""

import pytest

from companion.core.ai_client import AIAuthenticationError, AIModelNotFoundError
from companion.core.request_builder import RequestBuilder
from companion.core.tools import ToolRegistry
from companion.models.config import APIConfig, CompanionConfig, ToolsConfig
from companion.models.gemini import (
    HARM_CATEGORIES,
    GenerateContentRequest,
    ImageData,
)

from tests.conftest import PNG_BASE64

BROWSER_TOOLS = {
    "openTab",
    "searchWeb",
    "getSelectedText",
    "copyToClipboard",
    "getCurrentTabInfo",
    "analyzeScreenshot",
}


@pytest.fixture
def builder(sample_config, registry):
    return RequestBuilder(sample_config, registry)


@pytest.fixture
def image():
    return ImageData(mime_type="image/png", base64_data=PNG_BASE64)


class TestRequestBuilder:
    """Test tool and image handling in built requests"""

    def test_text_request_declares_all_tools(self, builder):
        """Test a text-only request carries every declaration and AUTO mode"""
        payload = builder.build("Hello").to_payload()

        declared = {d["name"] for d in payload["tools"][0]["functionDeclarations"]}
        assert declared == BROWSER_TOOLS
        assert payload["toolConfig"] == {"functionCallingConfig": {"mode": "AUTO"}}

    def test_image_request_has_no_tools(self, builder, image):
        """Test image-bearing requests omit tools entirely"""
        request = builder.build("What is this?", image)
        payload = request.to_payload()

        assert not request.has_tools
        assert "tools" not in payload
        assert "toolConfig" not in payload

    @pytest.mark.parametrize("with_image", [True, False])
    def test_image_present_iff_tools_absent(self, builder, image, with_image):
        """Test image presence and tool declarations are mutually exclusive"""
        request = builder.build("question", image if with_image else None)
        assert request.has_tools is not with_image

    def test_nested_request_has_no_tools(self, builder):
        """Test allow_tools=False strips declarations from text requests"""
        payload = builder.build("Summarize", allow_tools=False).to_payload()

        assert "tools" not in payload
        assert "toolConfig" not in payload

    def test_parts_order_image_first(self, builder, image):
        """Test the inline image part precedes the text part"""
        parts = builder.build("Describe", image).to_payload()["contents"][0]["parts"]

        assert parts == [
            {"inline_data": {"mime_type": "image/png", "data": PNG_BASE64}},
            {"text": "Describe"},
        ]

    def test_safety_settings_fixed(self, builder):
        """Test all five categories are set to BLOCK_NONE"""
        settings = builder.build("Hi").to_payload()["safetySettings"]

        assert [s["category"] for s in settings] == list(HARM_CATEGORIES)
        assert all(s["threshold"] == "BLOCK_NONE" for s in settings)
        assert len(settings) == 5

    def test_uses_selected_model(self, sample_config, registry):
        """Test the request targets the configured model"""
        sample_config.selected_model = "gemini-1.5-pro"
        request = RequestBuilder(sample_config, registry).build("Hi")
        assert request.model_id == "gemini-1.5-pro"

    def test_missing_api_key(self, registry):
        """Test a missing key is a precondition failure"""
        builder = RequestBuilder(CompanionConfig(api=APIConfig(api_key=None)), registry)

        with pytest.raises(AIAuthenticationError, match="API key"):
            builder.build("Hi")

    def test_unknown_model(self, sample_config, registry):
        """Test an unknown selection is a precondition failure"""
        sample_config.selected_model = "gemini-0-nonexistent"

        with pytest.raises(AIModelNotFoundError, match="Selected model not found"):
            RequestBuilder(sample_config, registry).build("Hi")

    def test_empty_registry_sends_no_tools(self, sample_config):
        """Test an empty registry produces no tools block"""
        registry = ToolRegistry(ToolsConfig(enabled=False)).initialize()
        request = RequestBuilder(sample_config, registry).build("Hi")

        assert not request.has_tools
        assert "tools" not in request.to_payload()


class TestGenerateContentRequest:
    """Test the request model invariants"""

    def test_rejects_tools_with_image(self, image):
        """Test the model refuses tools alongside an image"""
        with pytest.raises(ValueError):
            GenerateContentRequest(
                model_id="m",
                message="x",
                image=image,
                function_declarations=({"name": "openTab"},),
            )

    def test_image_from_data_url(self):
        """Test parsing a screenshot data URL"""
        image = ImageData.from_data_url(f"data:image/png;base64,{PNG_BASE64}")

        assert image.mime_type == "image/png"
        assert image.base64_data == PNG_BASE64

    def test_image_from_bad_data_url(self):
        with pytest.raises(ValueError):
            ImageData.from_data_url("https://example.test/image.png")
