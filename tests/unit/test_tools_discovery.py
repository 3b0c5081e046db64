"""Tests for built-in tool discovery"""

from companion.tools.registry import (
    BUILT_IN_PACKAGE,
    ToolDiscovery,
    discover_built_in_tools,
    module_of,
)


class TestToolDiscovery:
    """Test ToolDiscovery"""

    def test_discovers_browser_tools(self):
        tools = discover_built_in_tools()

        assert len(tools) == 6
        tool_def, handler = tools["getCurrentTabInfo"]
        assert tool_def.parameters["required"] == ["question"]
        assert module_of(handler) == "browser_tools"

    def test_scan_single_module(self):
        tools = ToolDiscovery().discover_tools([f"{BUILT_IN_PACKAGE}.browser_tools"])
        assert "copyToClipboard" in tools

    def test_declarations_are_gemini_compatible(self):
        """Test no declaration carries keywords outside Gemini's schema subset"""
        for tool_def, _ in discover_built_in_tools().values():
            declaration = tool_def.to_function_declaration()
            assert set(declaration) == {"name", "description", "parameters"}
            for schema in declaration["parameters"]["properties"].values():
                assert "default" not in schema
                assert schema["type"] == "string"

    def test_module_of_foreign_handler(self):
        class Stub:
            pass

        assert module_of(Stub()) == "unknown"
