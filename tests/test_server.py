from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from web_search_mcp.config import Settings
from web_search_mcp.http_client import AsyncHttpClient
from web_search_mcp.server import (
    TOOL_NAME,
    build_search_service,
    create_server,
    web_search_tool,
)


def _client(html: str = "<html></html>") -> AsyncHttpClient:
    return AsyncHttpClient(
        transport=httpx.MockTransport(lambda _: httpx.Response(200, text=html))
    )


@pytest.mark.anyio
async def test_server_lists_web_search_tool() -> None:
    server = create_server(Settings(server_name="test-server"), http_client=_client())

    tools = await server.list_tools()

    assert server.name == "test-server"
    assert [tool.name for tool in tools] == [TOOL_NAME]
    assert "query" in tools[0].inputSchema["properties"]


@pytest.mark.anyio
async def test_web_search_tool_returns_wire_shape(results_html: str) -> None:
    client = _client(results_html)
    service = build_search_service(Settings(), http_client=client)

    payload = await web_search_tool(service, "python asyncio", 2)
    await client.aclose()

    assert payload["success"] is True
    assert payload["query"] == "python asyncio"
    assert payload["resultCount"] == 2
    assert set(payload["results"][0]) == {"title", "url", "snippet"}
    assert "error" not in payload


@pytest.mark.anyio
async def test_web_search_tool_reports_validation_error() -> None:
    client = _client()
    service = build_search_service(Settings(), http_client=client)

    payload = await web_search_tool(service, "   ")
    await client.aclose()

    assert payload == {
        "success": False,
        "query": "   ",
        "error": "Query cannot be empty or whitespace only",
    }


def _payload(result: Any) -> dict[str, Any]:
    # FastMCP returns either the content blocks or (content, structured).
    content = result[0] if isinstance(result, tuple) else result
    return json.loads(content[0].text)


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("arguments", "expected"),
    [
        (
            {"query": "python", "max_results": "lots"},
            {"success": False, "query": "python", "error": "max_results must be an integer"},
        ),
        (
            {"query": 123},
            {"success": False, "query": "", "error": "Query must be a non-empty string"},
        ),
        (
            {"query": "python", "max_results": 2.5},
            {"success": False, "query": "python", "error": "max_results must be an integer"},
        ),
        (
            {"query": "python", "max_results": True},
            {"success": False, "query": "python", "error": "max_results must be an integer"},
        ),
        (
            {"query": "python", "max_results": 0},
            {"success": False, "query": "python", "error": "max_results must be at least 1"},
        ),
    ],
)
async def test_tool_call_with_bad_arguments_returns_failure_response(
    arguments: dict[str, Any], expected: dict[str, Any]
) -> None:
    calls = 0

    def handler(_: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, text="<html></html>")

    client = AsyncHttpClient(transport=httpx.MockTransport(handler))
    server = create_server(Settings(), http_client=client)

    result = await server.call_tool(TOOL_NAME, arguments)
    await client.aclose()

    assert _payload(result) == expected
    assert calls == 0


@pytest.mark.anyio
async def test_tool_call_returns_results(results_html: str) -> None:
    client = _client(results_html)
    server = create_server(Settings(), http_client=client)

    result = await server.call_tool(TOOL_NAME, {"query": "python asyncio", "max_results": 3})
    await client.aclose()

    payload = _payload(result)
    assert payload["success"] is True
    assert payload["resultCount"] == 3


@pytest.mark.anyio
async def test_tool_schema_still_describes_argument_types() -> None:
    server = create_server(Settings(), http_client=_client())

    tools = await server.list_tools()
    properties = tools[0].inputSchema["properties"]

    assert properties["query"]["type"] == "string"
    assert properties["max_results"]["type"] == "integer"
    assert properties["max_results"]["maximum"] == 20
    assert tools[0].inputSchema["required"] == ["query"]
