"""
MCP server for the retreat ledger.

Exposes the desktop-app commands through the Model Context Protocol.
"""

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from retiros.core.database import Database
from retiros.core.exceptions import RetirosError
from retiros.tools.tools import RetirosTools, create_tool_schemas

logger = logging.getLogger(__name__)


class RetirosServer:
    """MCP server for retreat ledger data."""

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize the MCP server.

        Args:
            database_url: Optional database URL.
                         If None, uses DATABASE_URL or the default file.
        """
        self.db = Database(database_url)
        self.tools = RetirosTools(self.db)
        self.server = Server("retiros")
        self.handlers: Dict[str, Callable[..., Awaitable[Dict[str, Any]]]] = {
            schema["name"]: getattr(self.tools, schema["name"])
            for schema in create_tool_schemas()
        }

        # Register handlers
        self._register_handlers()

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """
        Run one tool and format its result as text.

        Ledger errors (bad input, missing records, storage failures) are
        reported as "Error: ..." text rather than raised.
        """
        handler = self.handlers.get(name)
        if handler is None:
            return f"Unknown tool: {name}"

        arguments = arguments or {}
        try:
            inspect.signature(handler).bind(**arguments)
        except TypeError as e:
            # Missing or unexpected arguments
            return f"Error: {e}"

        try:
            result = await handler(**arguments)
        except RetirosError as e:
            return f"Error: {e}"
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return f"Error executing tool: {e}"

        return json.dumps(result, indent=2, ensure_ascii=False)

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """List available tools."""
            return [
                Tool(
                    name=schema["name"],
                    description=schema["description"],
                    inputSchema=schema["inputSchema"],
                )
                for schema in create_tool_schemas()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool calls."""
            if not await self.db.is_available():
                error_msg = (
                    "Database not available. Check DATABASE_URL or pass --database-url."
                )
                return [TextContent(type="text", text=error_msg)]

            text = await self.dispatch(name, arguments)
            return [TextContent(type="text", text=text)]

    async def run(self) -> None:  # pragma: no cover
        """Run the MCP server using stdio transport."""
        await self.db.init_schema()
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.db.dispose()


async def run_server(database_url: Optional[str] = None) -> None:  # pragma: no cover
    """
    Run the retreat ledger MCP server.

    Args:
        database_url: Optional database URL.
                     If None, uses DATABASE_URL or the default file.
    """
    server = RetirosServer(database_url)
    await server.run()
