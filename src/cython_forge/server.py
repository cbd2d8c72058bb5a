"""MCP server exposing environment discovery and builds."""
import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.server import stdio

from cython_forge.builds import BuildExecutor, CommandSink, ShellCommandSink, inspect_project
from cython_forge.config import ForgeConfig, load_config
from cython_forge.environments import DiscoveryCoordinator
from cython_forge.errors import ForgeError, log_error
from cython_forge.logging import configure_logging, get_logger
from cython_forge.paths.platforms import HOST_RULES, PathRules

logger = get_logger("server")

SERVER_NAME = "mcp-cython-forge"
SERVER_VERSION = "0.1.0"

tools = [
    types.Tool(
        name="forge_discover_environments",
        description="Discover conda and virtualenv Python environments on this machine",
        inputSchema={
            "type": "object",
            "properties": {
                "workspace_root": {"type": "string", "description": "Workspace folder to search first"}
            },
        },
    ),
    types.Tool(
        name="forge_select_environment",
        description="Validate a manually chosen virtual environment folder",
        inputSchema={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Virtual environment folder"}
            },
            "required": ["path"],
        },
    ),
    types.Tool(
        name="forge_inspect_project",
        description="Check whether a folder is safe and contains setup.py",
        inputSchema={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Project folder"}
            },
            "required": ["path"],
        },
    ),
    types.Tool(
        name="forge_build",
        description="Run setup.py with the configured build arguments inside a virtual environment",
        inputSchema={
            "type": "object",
            "properties": {
                "project_dir": {"type": "string", "description": "Folder containing setup.py"},
                "environment_path": {"type": "string", "description": "Virtual environment folder"},
            },
            "required": ["project_dir", "environment_path"],
        },
    ),
    types.Tool(
        name="forge_dispose_build",
        description="Stop and discard the current build session",
        inputSchema={"type": "object", "properties": {}},
    ),
]


@dataclass
class ForgeApp:
    """Composition root owning configuration, discovery and the build sink"""
    config: ForgeConfig
    discovery: DiscoveryCoordinator
    builds: BuildExecutor
    rules: PathRules = field(default=HOST_RULES)

    async def discover_environments(self, workspace_root: Optional[str] = None) -> list:
        return await self.discovery.discover(workspace_root)

    async def execute_build(self, project_dir: str, environment_path: str):
        return await self.builds.execute(project_dir, environment_path)

    async def aclose(self) -> None:
        await self.builds.dispose()


def create_app(
    config: Optional[ForgeConfig] = None,
    sink: Optional[CommandSink] = None,
    rules: PathRules = HOST_RULES,
) -> ForgeApp:
    config = config or load_config()
    return ForgeApp(
        config=config,
        discovery=DiscoveryCoordinator(config, rules=rules),
        builds=BuildExecutor(sink or ShellCommandSink(), config, rules),
        rules=rules,
    )


def _result(success: bool, **payload: Any) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps({"success": success, **payload}))]


async def handle_tool_call(
    app: ForgeApp, name: str, arguments: Optional[Dict[str, Any]]
) -> list[types.TextContent]:
    """Dispatch one tool call; errors become failure payloads."""
    arguments = arguments or {}
    logger.debug({"event": "tool_call", "tool": name, "arguments": arguments})

    try:
        if name == "forge_discover_environments":
            candidates = await app.discover_environments(arguments.get("workspace_root"))
            return _result(True, data={
                "environments": [c.to_dict() for c in candidates],
                "manual_selection_required": not candidates,
            })

        elif name == "forge_select_environment":
            candidate = app.discovery.select_manual(arguments.get("path"))
            return _result(True, data=candidate.to_dict())

        elif name == "forge_inspect_project":
            return _result(True, data=inspect_project(arguments.get("path"), app.rules))

        elif name == "forge_build":
            submission = await app.execute_build(
                arguments.get("project_dir"), arguments.get("environment_path")
            )
            return _result(True, data=submission.to_dict())

        elif name == "forge_dispose_build":
            await app.aclose()
            return _result(True, data={"state": app.builds.state.value})

        return _result(False, error=f"Unknown tool: {name}")

    except ForgeError as e:
        log_error(e, {"tool": name}, logger)
        return _result(False, error=str(e), details=e.details)
    except Exception as e:
        log_error(e, {"tool": name, "arguments": arguments}, logger)
        return _result(False, error=str(e))


async def init_server(app: ForgeApp) -> Server:
    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> list[types.TextContent]:
        return await handle_tool_call(app, name, arguments)

    return server


async def serve(config: Optional[ForgeConfig] = None) -> None:
    configure_logging()
    logger.info("Starting MCP cython forge server")
    app = create_app(config)
    server = await init_server(app)
    try:
        async with stdio.stdio_server() as (read_stream, write_stream):
            init_options = InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=types.ServerCapabilities(
                    tools=types.ToolsCapability(listChanged=False),
                    logging=types.LoggingCapability(),
                ),
            )
            await server.run(read_stream, write_stream, init_options)
    finally:
        await app.aclose()
        logger.info("Build sink disposed, server stopped")


def main() -> None:
    """Run the MCP server."""
    try:
        asyncio.run(serve())
    except ForgeError as e:
        log_error(e, {"phase": "startup"}, logger)
        raise SystemExit(1) from e
