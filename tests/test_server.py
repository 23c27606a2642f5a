"""Tests for the MCP server tool handlers."""
import json

import pytest
from pydantic import AnyUrl

from jamf_state import server
from jamf_state.config import Manifest
from jamf_state.utils.audit_log import log_change, setup_audit_logging


@pytest.fixture
def wired(fake, monkeypatch):
    """Serve a manifest and route the server's HTTP client to the fake server."""
    manifest = Manifest({
        "connection": {"api_url": "https://jamf.test:8443", "api_username": "admin",
                       "api_password": "jamf1234", "timeout": 1},
        "resources": [
            {"kind": "category", "name": "Utilities", "priority": 9},
            {"kind": "policy", "name": "Install Tools"},
        ],
    })
    monkeypatch.setattr(server, "manifest", manifest)
    monkeypatch.setattr(server, "_client", lambda m: fake.client())
    fake.route("GET", "/JSSResource/categories", {"categories": [{"id": 4, "name": "Utilities"}]})
    fake.route("GET", "/JSSResource/categories/id/4", {"category": {"id": 4, "name": "Utilities", "priority": 3}})
    return fake


def payload(result):
    return json.loads(result[0].text)


class TestTools:
    """Tests for tool dispatch and handlers."""

    @pytest.mark.asyncio
    async def test_list_tools(self):
        """All tools are advertised."""
        tools = await server.list_tools()
        names = {t.name for t in tools}
        assert names == {
            "list_resource_kinds",
            "check_health",
            "get_resource_state",
            "preview_manifest",
            "apply_manifest",
            "get_audit_log",
        }

    @pytest.mark.asyncio
    async def test_list_resource_kinds(self):
        """Kinds are listed with their fields."""
        data = payload(await server.call_tool("list_resource_kinds", {}))
        kinds = {k["kind"]: k for k in data["kinds"]}
        assert kinds["building"]["format"] == "json"
        assert kinds["smtp_server"]["singleton"] is True
        assert {"name": "priority", "type": "integer", "required": True} in kinds["category"]["fields"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        """Unknown tools are reported, not raised."""
        result = await server.call_tool("reboot_server", {})
        assert result[0].text == "Unknown tool: reboot_server"

    @pytest.mark.asyncio
    async def test_check_health(self, wired):
        """Health is classified."""
        data = payload(await server.call_tool("check_health", {}))
        assert data["state"] == "healthy"

    @pytest.mark.asyncio
    async def test_get_resource_state(self, wired):
        """Current state is returned as JSON."""
        data = payload(await server.call_tool(
            "get_resource_state", {"kind": "category", "name": "Utilities"}
        ))
        assert data["ensure"] == "present"
        assert data["id"] == 4
        assert data["attributes"]["priority"] == 3

    @pytest.mark.asyncio
    async def test_tool_errors_reported(self, wired):
        """Errors become an error message."""
        result = await server.call_tool("get_resource_state", {"kind": "printer", "name": "x"})
        assert result[0].text.startswith("Error: Unknown resource kind")

    @pytest.mark.asyncio
    async def test_preview_given_resources(self, wired):
        """Preview uses the given declarations over the manifest's."""
        result = await server.call_tool("preview_manifest", {
            "resources": [{"kind": "category", "name": "Utilities", "priority": 9}]
        })
        assert "[~] Modify category/Utilities" in result[0].text
        assert wired.writes == []

    @pytest.mark.asyncio
    async def test_apply_dry_run(self, wired):
        """apply_manifest honours dry_run."""
        data = payload(await server.call_tool("apply_manifest", {
            "resources": [{"kind": "category", "name": "Utilities", "priority": 9}],
            "dry_run": True,
        }))
        assert data["dry_run"] is True
        assert data["changed"] == 1
        assert wired.writes == []

    @pytest.mark.asyncio
    async def test_get_audit_log(self, wired):
        """Recent writes are returned."""
        setup_audit_logging()
        log_change("category", "Utilities", "modify", "PUT", "u", True, user="mcp")
        data = payload(await server.call_tool("get_audit_log", {"kind": "category"}))
        assert data["count"] == 1
        assert data["changes"][0]["method"] == "PUT"


class TestResources:
    """Tests for MCP resources."""

    @pytest.mark.asyncio
    async def test_list_resources(self, wired):
        """Manifest resources are exposed as jamf:// URIs."""
        resources = await server.list_resources()
        uris = [str(r.uri) for r in resources]
        assert "jamf://category/Utilities" in uris
        assert "jamf://policy/Install%20Tools" in uris

    @pytest.mark.asyncio
    async def test_read_resource(self, wired):
        """Reading a resource returns its current state."""
        text = await server.read_resource(AnyUrl("jamf://category/Utilities"))
        assert json.loads(text)["attributes"]["priority"] == 3

    @pytest.mark.asyncio
    async def test_read_unknown_uri(self, wired):
        """Other URIs are reported as unknown."""
        text = await server.read_resource(AnyUrl("https://example.com/x"))
        assert "Unknown resource" in json.loads(text)["error"]
