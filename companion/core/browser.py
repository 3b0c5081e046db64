"""Browser capability surface consumed by the tools"""

import asyncio
import base64
import io
import logging
import webbrowser
from abc import ABC, abstractmethod

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MAX_PAGE_CONTENT = 15000

MAIN_CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    "main",
    ".main-content",
    "#main-content",
)


class BrowserError(Exception):
    """Raised when a platform call cannot be completed"""

    pass


class TabInfo(BaseModel):
    """The tab a tool operates on"""

    id: int
    url: str
    title: str = ""


class PageMeta(BaseModel):
    description: str = ""
    keywords: str = ""


class PageInfo(BaseModel):
    """Structured content extracted from a page"""

    url: str
    title: str = ""
    content: str = ""
    meta: PageMeta = Field(default_factory=PageMeta)


class BrowserPlatform(ABC):
    """Platform operations available to tool handlers"""

    @abstractmethod
    async def open_tab(self, url: str) -> TabInfo:
        """Open ``url`` in a new tab"""
        pass

    @abstractmethod
    async def get_active_tab(self) -> TabInfo | None:
        """The active tab, or None when there is none"""
        pass

    @abstractmethod
    async def get_selected_text(self, tab: TabInfo) -> str:
        pass

    @abstractmethod
    async def extract_page_info(self, tab: TabInfo) -> PageInfo:
        pass

    @abstractmethod
    async def capture_visible_tab(self) -> str:
        """Capture the visible area as a ``data:image/png;base64,...`` URL"""
        pass

    @abstractmethod
    async def write_clipboard(self, text: str) -> None:
        pass


def extract_page_info(html: str, url: str) -> PageInfo:
    """Pull title, main content and meta tags out of an HTML document"""
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    main = None
    for selector in MAIN_CONTENT_SELECTORS:
        main = soup.select_one(selector)
        if main is not None:
            break
    if main is None:
        main = soup.body or soup

    content = main.get_text(separator="\n", strip=True)[:MAX_PAGE_CONTENT]
    title = soup.title.get_text(strip=True) if soup.title else ""

    def meta_content(name: str) -> str:
        tag = soup.find("meta", attrs={"name": name})
        return (tag.get("content") or "") if tag else ""

    return PageInfo(
        url=url,
        title=title,
        content=content,
        meta=PageMeta(
            description=meta_content("description"),
            keywords=meta_content("keywords"),
        ),
    )


class DesktopBrowser(BrowserPlatform):
    """Terminal-side platform.

    Tabs open in the system browser. The "active tab" is the last URL opened
    or one set explicitly with ``set_active_page``; page content is fetched
    over HTTP. Screenshots use Pillow's ImageGrab, the clipboard pyperclip.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self._http_client = http_client
        self._tabs: list[TabInfo] = []
        self._active: TabInfo | None = None
        self.selection: str = ""

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=30.0,
                follow_redirects=True,
                headers={"User-Agent": "Mozilla/5.0 (compatible; Companion/0.1)"},
            )
        return self._http_client

    def set_active_page(self, url: str, title: str = "") -> TabInfo:
        """Treat ``url`` as the active tab without opening a browser window"""
        tab = TabInfo(id=len(self._tabs) + 1, url=url, title=title)
        self._tabs.append(tab)
        self._active = tab
        return tab

    def set_selection(self, text: str) -> None:
        self.selection = text

    async def open_tab(self, url: str) -> TabInfo:
        loop = asyncio.get_running_loop()
        opened = await loop.run_in_executor(None, webbrowser.open_new_tab, url)
        if not opened:
            logger.warning(f"System browser did not confirm opening {url}")
        return self.set_active_page(url)

    async def get_active_tab(self) -> TabInfo | None:
        return self._active

    async def get_selected_text(self, tab: TabInfo) -> str:
        return self.selection

    async def extract_page_info(self, tab: TabInfo) -> PageInfo:
        try:
            response = await self._client().get(tab.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BrowserError(f"Could not load {tab.url}: {e}") from e

        page = extract_page_info(response.text, str(response.url))
        if page.title and not tab.title:
            tab.title = page.title
        return page

    async def capture_visible_tab(self) -> str:
        loop = asyncio.get_running_loop()
        png_bytes = await loop.run_in_executor(None, self._grab_screen)
        return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")

    @staticmethod
    def _grab_screen() -> bytes:
        from PIL import ImageGrab

        try:
            image = ImageGrab.grab()
        except OSError as e:
            raise BrowserError(f"Screen capture unavailable: {e}") from e

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    async def write_clipboard(self, text: str) -> None:
        import pyperclip

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise BrowserError(f"Clipboard unavailable: {e}") from e

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
