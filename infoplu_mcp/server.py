from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List

import anyio
import mcp.types as types
import uvicorn
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from . import __version__
from .client import InfoPluClient
from .config import load_settings
from .tools import ALL_TOOLS, REGISTRY, invoke
from .utils import logger, new_request_id, Timer

SERVER_NAME = "infoplu-mcp-server"


@asynccontextmanager
async def lifespan(_server: Server) -> AsyncIterator[Dict[str, Any]]:
    # one HTTP session per server run, shared by every tool call
    client = InfoPluClient(load_settings())
    try:
        yield {"client": client}
    finally:
        await client.close()


server = Server(SERVER_NAME, version=__version__, lifespan=lifespan)


# ---------- tools catalog ----------
@server.list_tools()
async def handle_list_tools() -> List[types.Tool]:
    return [t.to_tool() for t in ALL_TOOLS]


# ---------- tools handler ----------
async def dispatch(name: str, arguments: Dict[str, Any], client: InfoPluClient) -> List[types.TextContent]:
    """
    Run one tool by name.
    Unknown names and invalid arguments raise; upstream failures come back as text.
    """
    tool = REGISTRY.get(name)
    if tool is None:
        raise ValueError(f"Unknown tool: {name}")

    rid = new_request_id()
    with Timer() as t:
        text = await invoke(tool, client, arguments)
    logger.info("tool_done", extra={"rid": rid, "tool": name, "elapsed_ms": round(t.elapsed_ms, 2)})

    return [types.TextContent(type="text", text=text)]


@server.call_tool()
async def handle_call_tool(name: str, arguments: dict) -> List[types.TextContent]:
    client: InfoPluClient = server.request_context.lifespan_context["client"]
    return await dispatch(name, arguments, client)


def _init_options() -> InitializationOptions:
    caps = server.get_capabilities(
        notification_options=NotificationOptions(),
        experimental_capabilities={},
    )
    return InitializationOptions(
        server_name=SERVER_NAME,
        server_version=__version__,
        capabilities=caps,
    )


# ---------- transports ----------
async def _main_stdio() -> None:
    async with stdio_server() as (read, write):
        logger.info("server_start", extra={"transport": "stdio"})
        await server.run(read, write, _init_options())


def build_sse_app() -> Starlette:
    """HTTP+SSE app: GET /sse (event stream), POST /messages/?session_id=..., GET /health."""
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(request.scope, request.receive, request._send) as (read, write):
            await server.run(read, write, _init_options())
        return Response()

    async def health(_request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "server": SERVER_NAME, "transport": "sse"})

    return Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
    )


def main() -> None:
    settings = load_settings()
    if settings.transport == "sse":
        logger.info("server_start", extra={"transport": "sse", "host": settings.host, "port": settings.port})
        uvicorn.run(build_sse_app(), host=settings.host, port=settings.port, log_level="info")
    else:
        anyio.run(_main_stdio)


if __name__ == "__main__":
    main()
