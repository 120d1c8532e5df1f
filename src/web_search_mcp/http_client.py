"""Async HTTP client used to fetch result pages."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fake_useragent import UserAgent

from web_search_mcp.errors import SearchNetworkError, network_error

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}


def random_user_agent() -> str:
    return UserAgent().random


class Response:
    """HTTP response wrapper."""

    __slots__ = ("status_code", "text", "url")

    def __init__(self, status_code: int, text: str, url: str) -> None:
        self.status_code = status_code
        self.text = text
        self.url = url


class AsyncHttpClient:
    """Async GET client with browser-like headers and HTTP/2 fallback."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: str | None = None,
        timeout: float = 30.0,
        max_redirects: int = 5,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._headers = {**BROWSER_HEADERS, "User-Agent": user_agent}
        self._proxy = proxy
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._http2 = http2
        self._transport = transport
        self.client = self._build_client()

    @property
    def has_proxy(self) -> bool:
        return self._proxy is not None

    @property
    def user_agent(self) -> str:
        return self._headers["User-Agent"]

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            proxy=None if self._transport is not None else self._proxy,
            timeout=self._timeout,
            follow_redirects=True,
            max_redirects=self._max_redirects,
            http2=self._http2,
            transport=self._transport,
        )

    async def get(self, url: str, **kwargs: Any) -> Response:
        client = self.client
        try:
            resp = await client.get(url, **kwargs)
        except httpx.HTTPError as ex:
            if _is_h2_protocol_error(ex) and (self._http2 or client is not self.client):
                await self._downgrade(client)
                return await self.get(url, **kwargs)
            raise _network_error(ex, url) from ex

        return Response(status_code=resp.status_code, text=resp.text, url=str(resp.url))

    async def _downgrade(self, failed: httpx.AsyncClient) -> None:
        """Switch to HTTP/1.1 after the server rejected our H2 handshake.

        The client is shared by concurrent searches. Only the first caller to
        see the error swaps it; later callers that failed on the old client
        just repeat their request on the new one. Requests still in flight on
        the old client may fail when it closes; the fetcher retries them.
        """
        if failed is not self.client:
            return
        logger.warning("H2 protocol error, falling back to HTTP/1.1")
        self._http2 = False
        self.client = self._build_client()
        await failed.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()


def _is_h2_protocol_error(ex: Exception) -> bool:
    message = str(ex)
    return "HPACK" in message or "ProtocolError" in message or "table size" in message


def _network_error(ex: httpx.HTTPError, url: str) -> SearchNetworkError:
    classified = network_error(ex, url=url)
    return SearchNetworkError(
        f"HTTP request failed: {classified.user_message} (URL: {url})",
        kind=classified.kind,
        url=url,
    )
