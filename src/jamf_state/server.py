"""MCP Server for Jamf Pro desired state management.

Exposes the reconciliation engine to MCP clients. The connection comes from
the manifest found at $JAMF_STATE_MANIFEST (or ./jamf.yaml).

Tools exposed:
- list_resource_kinds: Supported resource kinds and their fields
- check_health: Classify the server's health page
- get_resource_state: Current server-side state of one resource
- preview_manifest: Diff summary for a manifest (or given declarations)
- apply_manifest: Apply a manifest (or given declarations), optionally dry-run
- get_audit_log: Recent writes from the audit log
"""
import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import quote, unquote

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .client import JamfClient, check_health
from .config.manifest import Manifest
from .engine import ReconcileEngine
from .resources import KINDS, get_kind
from .utils.audit_log import get_recent_changes, setup_audit_logging
from .utils.logging_config import setup_logging, timed_section

logger = logging.getLogger(__name__)

# Loaded on first use
manifest: Optional[Manifest] = None


def get_manifest() -> Manifest:
    """Get or load the manifest."""
    global manifest
    if manifest is None:
        manifest = Manifest.load()
    return manifest


def _client(m: Manifest) -> JamfClient:
    return JamfClient(m.connection.to_session(), timeout=m.connection.request_timeout)


def _engine(m: Manifest, client: JamfClient) -> ReconcileEngine:
    return ReconcileEngine(
        client,
        connect_timeout=m.connection.timeout,
        auth_token=m.connection.auth_token,
        cookie=m.connection.jamf_cookie,
    )


def _text(payload: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=repr))]


# Create MCP server
server = Server("jamf-state")


# === TOOLS ===

_RESOURCES_ARG = {
    "type": "array",
    "items": {"type": "object"},
    "description": "Resource declarations ({kind, name, ...}); defaults to the manifest's resources",
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_resource_kinds",
            description="List supported Jamf resource kinds with their endpoints and fields",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="check_health",
            description="Check the Jamf server health page (healthy, awaiting setup, or error)",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_resource_state",
            description="Read the current server-side state of one resource",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {
                        "type": "string",
                        "description": "Resource kind (e.g., 'policy', 'account', 'smtp_server')"
                    },
                    "name": {
                        "type": "string",
                        "description": "Resource name (ignored for settings pages)"
                    }
                },
                "required": ["kind"]
            }
        ),
        Tool(
            name="preview_manifest",
            description="Show the changes a manifest would make without writing anything",
            inputSchema={
                "type": "object",
                "properties": {"resources": _RESOURCES_ARG},
                "required": []
            }
        ),
        Tool(
            name="apply_manifest",
            description="Reconcile the server against a manifest. Use dry_run to plan only.",
            inputSchema={
                "type": "object",
                "properties": {
                    "resources": _RESOURCES_ARG,
                    "dry_run": {
                        "type": "boolean",
                        "description": "Plan writes without sending them",
                        "default": False
                    },
                    "stop_on_error": {
                        "type": "boolean",
                        "description": "Stop at the first failed resource",
                        "default": False
                    }
                },
                "required": []
            }
        ),
        Tool(
            name="get_audit_log",
            description="Get recent writes from the audit log",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {"type": "string", "description": "Filter by resource kind"},
                    "name": {"type": "string", "description": "Filter by resource name"},
                    "limit": {
                        "type": "integer",
                        "description": "Maximum entries to return",
                        "default": 50
                    }
                },
                "required": []
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    async with timed_section(f"tool:{name}", resource=arguments.get("kind")):
        try:
            if name == "list_resource_kinds":
                return await handle_list_resource_kinds()

            elif name == "check_health":
                return await handle_check_health(get_manifest())

            elif name == "get_resource_state":
                return await handle_get_resource_state(
                    get_manifest(),
                    arguments["kind"],
                    arguments.get("name", "")
                )

            elif name == "preview_manifest":
                return await handle_preview_manifest(get_manifest(), arguments.get("resources"))

            elif name == "apply_manifest":
                return await handle_apply_manifest(
                    get_manifest(),
                    arguments.get("resources"),
                    arguments.get("dry_run", False),
                    arguments.get("stop_on_error", False)
                )

            elif name == "get_audit_log":
                return await handle_get_audit_log(
                    arguments.get("kind"),
                    arguments.get("name"),
                    arguments.get("limit", 50)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


# === TOOL HANDLERS ===

async def handle_list_resource_kinds() -> list[TextContent]:
    """List supported resource kinds."""
    kinds = []
    for name in sorted(KINDS):
        kind = KINDS[name]
        kinds.append({
            "kind": name,
            "path": kind.path,
            "format": kind.wire_format.value,
            "singleton": kind.singleton,
            "description": kind.description,
            "fields": [
                {"name": f.name, "type": f.type_name, "required": f.required}
                for f in kind.fields
            ],
        })
    return _text({"kinds": kinds})


async def handle_check_health(m: Manifest) -> list[TextContent]:
    """Classify the server health page."""
    async with _client(m) as client:
        report = await check_health(client)
    return _text({
        "api_url": m.connection.api_url,
        "state": report.state.value,
        "status_code": report.status_code,
        "entries": report.entries,
    })


async def handle_get_resource_state(m: Manifest, kind_name: str, name: str) -> list[TextContent]:
    """Read one resource's current state."""
    kind = get_kind(kind_name)
    async with _client(m) as client:
        engine = _engine(m, client)
        spec = engine.parser.parse({"kind": kind.name, "name": name})
        state = await engine.read(spec)

    data = state.to_dict()
    # Never echo secrets back
    data["attributes"] = {
        k: kind.field(k).display(v) if kind.field(k).sensitive else v
        for k, v in state.attributes.items()
    }
    return _text(data)


async def handle_preview_manifest(m: Manifest, resources: Optional[list]) -> list[TextContent]:
    """Preview changes for a manifest."""
    async with _client(m) as client:
        summary = await _engine(m, client).preview(resources or m.resources)
    return [TextContent(type="text", text=summary)]


async def handle_apply_manifest(
    m: Manifest,
    resources: Optional[list],
    dry_run: bool,
    stop_on_error: bool
) -> list[TextContent]:
    """Apply a manifest."""
    async with _client(m) as client:
        result = await _engine(m, client).apply_manifest(
            resources or m.resources,
            dry_run=dry_run,
            stop_on_error=stop_on_error,
            user="mcp",
        )
    return _text(result.to_dict())


async def handle_get_audit_log(
    kind: Optional[str],
    name: Optional[str],
    limit: int
) -> list[TextContent]:
    """Return recent audit entries."""
    records = get_recent_changes(kind=kind, name=name, limit=limit)
    return _text({
        "count": len(records),
        "changes": [
            {
                "timestamp": r.timestamp,
                "kind": r.kind,
                "name": r.name,
                "operation": r.operation,
                "method": r.method,
                "url": r.url,
                "success": r.success,
                "dry_run": r.dry_run,
                "error": r.error,
            }
            for r in records
        ],
    })


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List the manifest's resources."""
    m = get_manifest()
    resources = []

    for record in m.resources:
        kind = record.get("kind")
        name = record.get("name", kind)
        resources.append(Resource(
            uri=AnyUrl(f"jamf://{kind}/{quote(str(name))}"),
            name=f"{kind} {name}",
            description=f"Current server state of {kind} '{name}'",
            mimeType="application/json",
        ))

    return resources


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    # Parse URI: jamf://kind/name
    uri_str = str(uri)
    if uri_str.startswith("jamf://"):
        parts = uri_str[7:].split("/", 1)
        if len(parts) == 2:
            result = await handle_get_resource_state(get_manifest(), parts[0], unquote(parts[1]))
            return result[0].text

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    setup_audit_logging()
    setup_logging()

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
