"""Browser tools the model can call

Each tool performs one platform call sequence and always returns text; a
failure is reported in the returned string so the conversation can go on.
"""

import logging
from urllib.parse import quote

from companion.models.gemini import ImageData
from companion.models.tools import ExecutionContext, ToolCategory, ToolExample
from companion.tools import tool

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Feature not available outside of a browser session"

PAGE_ANALYSIS_PROMPT = """Analyze this webpage content to answer the following question: "{question}"

Content from: {title} ({url})

{content}

Please provide a clear, focused response addressing the question. Format your response in markdown."""


def build_page_prompt(question: str, page) -> str:
    """Prompt for the nested request that answers a question about a page"""
    return PAGE_ANALYSIS_PROMPT.format(
        question=question, title=page.title, url=page.url, content=page.content
    )


@tool(
    name="openTab",
    description="Opens a new browser tab with the specified URL",
    category=ToolCategory.NAVIGATION,
    tags=["browser", "tab", "url"],
    examples=[
        ToolExample(
            description="Open a documentation page",
            arguments={"url": "https://docs.python.org"},
            expected_result="Opened new tab with URL: https://docs.python.org",
        )
    ],
)
async def open_tab(url: str, context: ExecutionContext) -> str:
    """
    Open a URL in a new tab.

    Args:
        url: The URL to open in the new tab
    """
    if context.platform is None:
        return NOT_AVAILABLE
    try:
        await context.platform.open_tab(url)
    except Exception as e:
        logger.error(f"Error opening tab: {e}")
        return f"Failed to open tab: {e}"
    return f"Opened new tab with URL: {url}"


@tool(
    name="searchWeb",
    description="Performs a web search using Google",
    category=ToolCategory.NAVIGATION,
    tags=["browser", "search", "web"],
)
async def search_web(query: str, context: ExecutionContext) -> str:
    """
    Open a Google search for the query.

    Args:
        query: The search query to perform
    """
    if context.platform is None:
        return NOT_AVAILABLE
    search_url = "https://www.google.com/search?q=" + quote(query, safe="!'()*")
    try:
        await context.platform.open_tab(search_url)
    except Exception as e:
        logger.error(f"Error opening search: {e}")
        return f"Failed to perform web search: {e}"
    return f"Performed web search for: {query}"


@tool(
    name="getSelectedText",
    description="Gets the currently selected text from the active tab",
    category=ToolCategory.PAGE,
    tags=["browser", "selection", "text"],
)
async def get_selected_text(context: ExecutionContext, dummy: str = "") -> str:
    """
    Read the selection in the active tab.

    Args:
        dummy: This parameter is not used but required by the API
    """
    if context.platform is None:
        return NOT_AVAILABLE
    try:
        tab = await context.platform.get_active_tab()
        if tab is None:
            return "Failed to read selected text: No active tab found"
        selected = await context.platform.get_selected_text(tab)
    except Exception as e:
        logger.error(f"Error reading selection: {e}")
        return f"Failed to read selected text: {e}"
    return selected or "No text selected"


@tool(
    name="copyToClipboard",
    description="Copies the specified text to the clipboard",
    category=ToolCategory.CLIPBOARD,
    tags=["clipboard", "copy"],
    examples=[
        ToolExample(
            description="Copy a snippet",
            arguments={"text": "abc"},
            expected_result="Copied to clipboard: abc",
        )
    ],
)
async def copy_to_clipboard(text: str, context: ExecutionContext) -> str:
    """
    Write text to the clipboard.

    Args:
        text: The text to copy to the clipboard
    """
    if context.platform is None:
        return NOT_AVAILABLE
    try:
        await context.platform.write_clipboard(text)
    except Exception as e:
        logger.error(f"Error writing clipboard: {e}")
        return f"Failed to copy to clipboard: {e}"
    return f"Copied to clipboard: {text}"


@tool(
    name="getCurrentTabInfo",
    description=(
        "Gets information about the current tab and analyzes it based on the "
        "provided question"
    ),
    category=ToolCategory.PAGE,
    tags=["browser", "page", "analysis"],
)
async def get_current_tab_info(question: str, context: ExecutionContext) -> str:
    """
    Extract the active page and ask the model about it.

    Args:
        question: The specific question or analysis prompt about the page content
    """
    if context.platform is None or context.ask_model is None:
        return NOT_AVAILABLE

    try:
        tab = await context.platform.get_active_tab()
        if tab is None:
            raise LookupError("No active tab found")

        page = await context.platform.extract_page_info(tab)
        return await context.ask_model(build_page_prompt(question, page))

    except Exception as e:
        logger.error(f"Error getting tab info: {e}")
        return f"Failed to analyze page content: {e}"


@tool(
    name="analyzeScreenshot",
    description=(
        "Takes a screenshot of the current tab and analyzes it based on the "
        "provided question"
    ),
    category=ToolCategory.VISION,
    tags=["browser", "screenshot", "image", "analysis"],
)
async def analyze_screenshot(question: str, context: ExecutionContext) -> str:
    """
    Capture the visible tab and ask the model about the image.

    Args:
        question: The specific question or analysis prompt about the screenshot
    """
    if context.platform is None or context.ask_model is None:
        return NOT_AVAILABLE

    try:
        tab = await context.platform.get_active_tab()
        if tab is None:
            raise LookupError("No active tab found")

        data_url = await context.platform.capture_visible_tab()
        image = ImageData.from_data_url(data_url)
        return await context.ask_model(question, image)

    except Exception as e:
        logger.error(f"Error capturing screenshot: {e}")
        return f"Failed to analyze screenshot: {e}"
