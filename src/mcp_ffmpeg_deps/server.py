"""MCP server implementation."""
import asyncio
import json
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.server import stdio

from mcp_ffmpeg_deps import __version__
from mcp_ffmpeg_deps.config import Settings
from mcp_ffmpeg_deps.errors import ProvisionError, log_error
from mcp_ffmpeg_deps.host import create_load_utils, temporary_install_utils
from mcp_ffmpeg_deps.logging import configure_logging, get_logger
from mcp_ffmpeg_deps.binaries.throttle import ThrottleGuard
from mcp_ffmpeg_deps.plugin import (
    DependencyRegistry,
    ProvisioningSession,
    read_instructions,
    register,
)

logger = get_logger("server")

NAME_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "enum": ["ffmpeg", "ffprobe", "ffplay"],
            "description": "Dependency name",
        }
    },
    "required": ["name"],
}

tools = [
    types.Tool(
        name="ffmpeg_deps_load",
        description="Resolve a validated path to an installed or system-wide ffmpeg binary",
        inputSchema=NAME_SCHEMA,
    ),
    types.Tool(
        name="ffmpeg_deps_install",
        description="Download and install an ffmpeg binary for this platform, then resolve it",
        inputSchema=NAME_SCHEMA,
    ),
    types.Tool(
        name="ffmpeg_deps_instructions",
        description="Manual installation notes for a dependency, if it has any",
        inputSchema=NAME_SCHEMA,
    ),
]


def _text(payload: Dict[str, Any]) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload))]


def create_registry(settings: Settings) -> DependencyRegistry:
    session = ProvisioningSession(ThrottleGuard(window=settings.throttle_window))
    return register(DependencyRegistry(), session)


async def handle_tool_call(
    name: str,
    arguments: Dict[str, Any],
    registry: DependencyRegistry,
    settings: Settings,
) -> list[types.TextContent]:
    dependency = (arguments or {}).get("name")
    try:
        if not dependency:
            return _text({"success": False, "error": "Missing argument: name"})

        if name == "ffmpeg_deps_load":
            handlers = registry.get(dependency)
            path = await handlers.load(create_load_utils(settings.data_path))
            return _text({"success": True, "data": {"name": dependency, "path": str(path)}})

        elif name == "ffmpeg_deps_install":
            handlers = registry.get(dependency)
            async with temporary_install_utils(settings, dependency) as utils:
                installed = await handlers.install(utils)
                path = await handlers.load(utils)
            return _text({
                "success": True,
                "data": {
                    "name": dependency,
                    "path": str(path),
                    "installed": bool(installed),
                },
            })

        elif name == "ffmpeg_deps_instructions":
            handlers = registry.get(dependency)
            return _text({
                "success": True,
                "data": {"name": dependency, "instructions": read_instructions(handlers)},
            })

        return _text({"success": False, "error": f"Unknown tool: {name}"})

    except ProvisionError as e:
        log_error(e, {"tool": name, "dependency": dependency}, logger)
        error = e.to_error_data()
        return _text({
            "success": False,
            "error": error.message,
            "code": error.code,
            "details": error.data,
        })
    except Exception as e:
        log_error(e, {"tool": name, "dependency": dependency}, logger)
        return _text({"success": False, "error": str(e)})


async def init_server(settings: Optional[Settings] = None) -> Server:
    settings = settings or Settings.from_env()
    registry = create_registry(settings)

    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    server = Server("mcp-ffmpeg-deps")

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> list[types.TextContent]:
        logger.debug(f"Tool call received: {name} with arguments {arguments}")
        return await handle_tool_call(name, arguments, registry, settings)

    return server


async def serve() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Starting MCP ffmpeg dependency server")
    server = await init_server(settings)
    async with stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name="mcp-ffmpeg-deps",
            server_version=__version__,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                logging=types.LoggingCapability(),
            ),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    """Run the MCP server."""
    asyncio.run(serve())
