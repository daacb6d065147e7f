"""
MCP protocol adapter.

Exposes the dispatch engine and the resource catalog over the low-level MCP
server: list_tools, call_tool, list_resources, read_resource and
logging/setLevel. Each inbound request also binds the client session to the
notification emitter so console lines and resource-list changes can be
pushed outside the request/response cycle.
"""

import logging
from typing import List

import mcp.server.stdio
from mcp import types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError

from .context import ServerContext
from .dispatch import ToolDispatcher
from .errors import ResourceNotFoundError

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-cloud-browser"
SERVER_VERSION = "0.1.0"

# JSON-RPC error code MCP uses for unknown resources.
RESOURCE_NOT_FOUND = -32002


class CloudBrowserServer:
    """MCP server for remote browser sessions and Notion."""

    def __init__(self, ctx: ServerContext):
        self.ctx = ctx
        self.dispatcher = ToolDispatcher(ctx)
        self.server = Server(SERVER_NAME)
        self._setup_handlers()

    def _bind_session(self) -> None:
        try:
            session = self.server.request_context.session
        except LookupError:
            return
        self.ctx.emitter.bind(session)

    def _setup_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            self._bind_session()
            return self.dispatcher.list_tools()

        @self.server.list_resources()
        async def handle_list_resources() -> List[types.Resource]:
            self._bind_session()
            return self.list_resources()

        @self.server.set_logging_level()
        async def handle_set_logging_level(level: types.LoggingLevel) -> None:
            self._bind_session()
            self.ctx.emitter.set_level(level)

        # Registered as raw request handlers so the result keeps isError and
        # the text/blob split regardless of the installed mcp release.
        self.server.request_handlers[types.ReadResourceRequest] = self._handle_read_resource
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    def list_resources(self) -> List[types.Resource]:
        return [
            types.Resource(uri=d.uri, mimeType=d.mime_type, name=d.name)
            for d in self.ctx.catalog.list()
        ]

    def read_resource(self, uri: str) -> types.ReadResourceResult:
        """
        Raises:
            McpError: with code -32002 when the URI is unknown.
        """
        try:
            content = self.ctx.catalog.read(uri)
        except ResourceNotFoundError as e:
            raise McpError(types.ErrorData(code=RESOURCE_NOT_FOUND, message=str(e), data={"uri": uri}))

        if content.text is not None:
            item = types.TextResourceContents(uri=uri, mimeType=content.mime_type, text=content.text)
        else:
            item = types.BlobResourceContents(uri=uri, mimeType=content.mime_type, blob=content.blob)
        return types.ReadResourceResult(contents=[item])

    async def _handle_read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        self._bind_session()
        return types.ServerResult(self.read_resource(str(req.params.uri)))

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        self._bind_session()
        result = await self.dispatcher.dispatch(req.params.name, req.params.arguments or {})
        return types.ServerResult(result.to_mcp())

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=SERVER_NAME,
            server_version=SERVER_VERSION,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(resources_changed=True),
                experimental_capabilities={},
            ),
        )

    async def run(self) -> None:
        """Serve over stdio until the client disconnects, then close every session."""
        self.ctx.registry.start_reaper()
        try:
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                await self.server.run(read_stream, write_stream, self.initialization_options())
        finally:
            logger.info("Client disconnected; closing browser sessions")
            await self.ctx.aclose()


__all__ = [
    "CloudBrowserServer",
    "SERVER_NAME",
    "SERVER_VERSION",
    "RESOURCE_NOT_FOUND",
]
