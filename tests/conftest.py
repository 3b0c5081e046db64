"""Shared test fixtures and configuration"""

import json
import tempfile
from pathlib import Path
from typing import Callable, Generator

import httpx
import pytest
import yaml

from companion.core.ai_client import GeminiClient
from companion.core.browser import BrowserPlatform, PageInfo, PageMeta, TabInfo
from companion.core.pipeline import RequestPipeline
from companion.core.tools import ToolRegistry
from companion.models.config import APIConfig, ChatConfig, CompanionConfig

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


class FakeBrowser(BrowserPlatform):
    """In-memory platform recording every call"""

    def __init__(self, tab: TabInfo | None = None, page: PageInfo | None = None):
        self.tab = tab
        self.page = page or PageInfo(
            url="https://example.test/article",
            title="Example Article",
            content="Python is a programming language.",
            meta=PageMeta(description="An example", keywords="python"),
        )
        self.selection = ""
        self.opened: list[str] = []
        self.clipboard: list[str] = []
        self.fail_with: Exception | None = None

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def open_tab(self, url: str) -> TabInfo:
        self._maybe_fail()
        self.opened.append(url)
        self.tab = TabInfo(id=len(self.opened), url=url)
        return self.tab

    async def get_active_tab(self) -> TabInfo | None:
        self._maybe_fail()
        return self.tab

    async def get_selected_text(self, tab: TabInfo) -> str:
        self._maybe_fail()
        return self.selection

    async def extract_page_info(self, tab: TabInfo) -> PageInfo:
        self._maybe_fail()
        return self.page

    async def capture_visible_tab(self) -> str:
        self._maybe_fail()
        return f"data:image/png;base64,{PNG_BASE64}"

    async def write_clipboard(self, text: str) -> None:
        self._maybe_fail()
        self.clipboard.append(text)


def text_response(text: str) -> dict:
    """A generateContent body whose first part is text"""
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def function_call_response(name: str, args) -> dict:
    """A generateContent body whose first part is a function call"""
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [{"functionCall": {"name": name, "args": args}}],
                }
            }
        ]
    }


class RecordingTransport:
    """httpx mock transport that replays queued responses and keeps requests"""

    def __init__(self, responses: list):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0)
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_config() -> CompanionConfig:
    """Create a sample configuration for testing"""
    return CompanionConfig(
        api=APIConfig(api_key="test-api-key"),
        chat=ChatConfig(max_history_length=10),
    )


@pytest.fixture
def sample_config_dict(temp_dir: Path) -> dict:
    """Create a sample configuration dictionary for YAML testing"""
    return {
        "api": {"api_key": "file-api-key", "request_timeout": 30},
        "selected_model": "gemini-1.5-pro",
        "chat": {
            "max_history_length": 25,
            "state_file": str(temp_dir / "state.yaml"),
        },
        "monitoring": {"log_level": "info"},
    }


@pytest.fixture
def sample_config_yaml(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a sample YAML config file"""
    config_path = temp_dir / "test-config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)
    return config_path


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment overrides that would leak into config loading"""
    for name in (
        "COMPANION_API_KEY",
        "GEMINI_API_KEY",
        "COMPANION_MODEL",
        "COMPANION_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registry() -> ToolRegistry:
    """Registry holding the built-in browser tools"""
    return ToolRegistry().initialize()


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser(tab=TabInfo(id=1, url="https://example.test/article"))


@pytest.fixture
def make_pipeline(
    sample_config, registry, fake_browser
) -> Callable[[list], tuple[RequestPipeline, RecordingTransport]]:
    """Build a pipeline whose HTTP calls replay the given responses"""

    def _make(responses: list) -> tuple[RequestPipeline, RecordingTransport]:
        transport = RecordingTransport(responses)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        client = GeminiClient(sample_config.api, http_client=http_client)
        return RequestPipeline(sample_config, registry, client, fake_browser), transport

    return _make
