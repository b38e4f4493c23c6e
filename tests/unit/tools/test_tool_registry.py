"""Unit tests for ToolRegistry."""

import pytest

from conduit_core.errors import ToolNotFoundError
from conduit_core.tools import ToolDescriptor, ToolRegistry


def _descriptor(domain: str, name: str, handler=None) -> ToolDescriptor:
    return ToolDescriptor(
        domain=domain,
        name=name,
        description=f"{name} tool",
        handler=handler or (lambda params: {"success": True, "echo": params}),
        parameter_schema={"type": "object"},
    )


class TestRegister:
    def test_register_and_get(self):
        registry = ToolRegistry()
        descriptor = _descriptor("fs", "read")
        registry.register("fs", "read", descriptor)
        assert registry.get("fs", "read") is descriptor
        assert registry.get("fs", "write") is None
        assert len(registry) == 1

    def test_register_replaces(self):
        registry = ToolRegistry()
        registry.register("fs", "read", _descriptor("fs", "read"))
        replacement = _descriptor("fs", "read", lambda p: {"success": False})
        registry.register("fs", "read", replacement)
        assert registry.get("fs", "read") is replacement
        assert len(registry) == 1

    def test_register_mismatch_rejected(self):
        with pytest.raises(ValueError):
            ToolRegistry().register("fs", "read", _descriptor("fs", "write"))

    def test_decorator(self):
        registry = ToolRegistry()

        @registry.tool("math", "add", "Add two numbers")
        def add(params):
            return {"success": True, "sum": params["a"] + params["b"]}

        assert registry.get("math", "add").handler is add
        assert registry.domains() == ["math"]


class TestListForDomain:
    def test_listing_shape(self):
        registry = ToolRegistry()
        registry.register("fs", "read", _descriptor("fs", "read"))
        registry.register("fs", "write", _descriptor("fs", "write"))
        listing = registry.list_for_domain("fs")
        assert [t["name"] for t in listing] == ["read", "write"]
        assert set(listing[0]) == {"name", "description", "parameters"}

    def test_unknown_domain_is_empty(self):
        assert ToolRegistry().list_for_domain("nowhere") == []


class TestExecute:
    @pytest.mark.asyncio
    async def test_sync_handler(self):
        registry = ToolRegistry()
        registry.register("fs", "read", _descriptor("fs", "read"))
        result = await registry.execute("fs", "read", {"path": "/x"})
        assert result == {"success": True, "echo": {"path": "/x"}}

    @pytest.mark.asyncio
    async def test_async_handler(self):
        registry = ToolRegistry()

        async def handler(params):
            return {"success": True, "async": True}

        registry.register("fs", "read", _descriptor("fs", "read", handler))
        assert await registry.execute("fs", "read", {}) == {"success": True, "async": True}

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        registry = ToolRegistry()
        registry.register("fs", "read", _descriptor("fs", "read"))
        with pytest.raises(ToolNotFoundError) as exc_info:
            await registry.execute("fs", "missing", {})
        assert exc_info.value.tool_name == "missing"
        assert "fs" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_domain(self):
        with pytest.raises(ToolNotFoundError):
            await ToolRegistry().execute("nowhere", "read", {})

    @pytest.mark.asyncio
    async def test_handler_exception_propagates(self):
        registry = ToolRegistry()

        def broken(params):
            raise RuntimeError("kaput")

        registry.register("fs", "read", _descriptor("fs", "read", broken))
        with pytest.raises(RuntimeError, match="kaput"):
            await registry.execute("fs", "read", {})


class TestBuiltinTools:
    def test_domains_registered(self, tool_registry: ToolRegistry):
        domains = tool_registry.domains()
        for domain in ("filesystem", "terminal", "calendar", "github", "notion", "slack"):
            assert domain in domains

    def test_filesystem_tools(self, tool_registry: ToolRegistry):
        names = {t["name"] for t in tool_registry.list_for_domain("filesystem")}
        assert names == {
            "read_file",
            "write_file",
            "list_directory",
            "search_files",
            "get_file_stats",
            "create_directory",
            "delete_file",
            "copy_file",
            "move_file",
        }

    @pytest.mark.asyncio
    async def test_placeholder_service(self, tool_registry: ToolRegistry):
        result = await tool_registry.execute(
            "slack", "send_message", {"channel": "#general", "message": "hi"}
        )
        assert result["success"] is True
        assert "note" in result
