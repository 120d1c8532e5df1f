"""MCP server exposing the ``web_search`` tool."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from web_search_mcp.config import Settings
from web_search_mcp.http_client import AsyncHttpClient, random_user_agent
from web_search_mcp.logs import EventLogger
from web_search_mcp.registry import ProviderRegistry
from web_search_mcp.service import SearchService
from web_search_mcp.validator import SearchValidator

logger = logging.getLogger(__name__)

TOOL_NAME = "web_search"
TOOL_DESCRIPTION = (
    "Search the internet for information. Uses DuckDuckGo search engine to "
    "return relevant web pages with titles, URLs, and descriptions."
)


def build_http_client(settings: Settings) -> AsyncHttpClient:
    user_agent = random_user_agent() if settings.random_user_agent else settings.user_agent
    return AsyncHttpClient(
        user_agent=user_agent,
        proxy=settings.proxy.url if settings.proxy else None,
        timeout=settings.http_timeout_seconds,
        max_redirects=settings.http_max_redirects,
        http2=settings.http2,
    )


def build_search_service(
    settings: Settings, *, http_client: AsyncHttpClient
) -> SearchService:
    events = EventLogger(logging.getLogger("web_search_mcp"), sanitize=settings.log_sanitize)
    registry = ProviderRegistry.from_settings(
        settings, http_client=http_client, events=events
    )
    return SearchService(
        provider=registry.default(),
        validator=SearchValidator(default_max_results=settings.search_max_results),
        timeout_seconds=settings.search_timeout_seconds,
        events=events.child("web_search_mcp.service"),
    )


async def web_search_tool(
    service: SearchService, query: object, max_results: object = None
) -> dict[str, Any]:
    response = await service.search(query, max_results)
    return response.to_dict()


def create_server(
    settings: Settings, *, http_client: AsyncHttpClient | None = None
) -> FastMCP:
    client = http_client or build_http_client(settings)
    service = build_search_service(settings, http_client=client)

    @asynccontextmanager
    async def lifespan(_: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await client.aclose()

    mcp = FastMCP(name=settings.server_name, lifespan=lifespan)

    # Arguments are typed Any so malformed input reaches SearchValidator and
    # comes back as a failure response instead of a tool error.
    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    async def web_search(
        query: Annotated[
            Any,
            Field(
                description="Search keywords or question.",
                json_schema_extra={"type": "string"},
            ),
        ],
        max_results: Annotated[
            Any,
            Field(
                description="Maximum number of results to return (default 10, max 20).",
                json_schema_extra={"type": "integer", "minimum": 1, "maximum": 20},
            ),
        ] = None,
    ) -> dict[str, Any]:
        return await web_search_tool(service, query, max_results)

    logger.info(
        "MCP server initialized name=%s version=%s provider=%s",
        settings.server_name,
        settings.server_version,
        service.provider.name,
    )
    return mcp
