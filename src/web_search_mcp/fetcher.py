from __future__ import annotations

import asyncio
import logging

from web_search_mcp.errors import SearchNetworkError
from web_search_mcp.http_client import AsyncHttpClient
from web_search_mcp.logs import EventLogger
from web_search_mcp.retry import RetryPolicy, Sleep, retry
from web_search_mcp.urls import build_search_url, redact_url

FETCH_RETRY_POLICY = RetryPolicy(max_attempts=3, base_delay=1.0)


class HtmlFetcher:
    """Fetches a result page for a query, retrying transient failures."""

    def __init__(
        self,
        *,
        http_client: AsyncHttpClient,
        base_url: str,
        path: str,
        query_param: str = "q",
        extra_params: dict[str, str] | None = None,
        retry_policy: RetryPolicy = FETCH_RETRY_POLICY,
        events: EventLogger | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._http_client = http_client
        self._base_url = base_url
        self._path = path
        self._query_param = query_param
        self._extra_params = dict(extra_params or {})
        self._retry_policy = retry_policy
        self._events = events or EventLogger(logging.getLogger(__name__))
        self._sleep = sleep

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def build_url(self, query: str, max_results: int | None = None) -> str:
        # The engine has no result-count parameter; max_results is accepted
        # for interface symmetry only.
        del max_results
        return build_search_url(
            self._base_url,
            self._path,
            query,
            query_param=self._query_param,
            extra_params=self._extra_params,
        )

    async def fetch(self, query: str, max_results: int | None = None) -> str:
        url = self.build_url(query, max_results)
        attempts = self._retry_policy.max_attempts
        self._events.debug(
            "fetch_start", url=url, query=query, max_results=max_results
        )

        def on_retry(attempt: int, error: Exception) -> None:
            self._events.warning(
                "fetch_retry",
                url=url,
                attempt=attempt,
                max_attempts=attempts,
                error=_message(error, url),
            )

        try:
            html = await retry(
                lambda: self._fetch_html(url),
                self._retry_policy,
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except SearchNetworkError as exc:
            self._events.error(
                "fetch_failed",
                url=url,
                kind=exc.kind,
                error=_message(exc, url),
            )
            raise SearchNetworkError(
                f"Failed to fetch search results: {exc.user_message}",
                kind=exc.kind,
                url=url,
                status_code=exc.status_code,
            ) from exc

        self._events.debug("fetch_complete", url=url, html_length=len(html))
        return html

    async def _fetch_html(self, url: str) -> str:
        response = await self._http_client.get(url)

        if response.status_code != 200:
            raise SearchNetworkError(
                f"Search engine returned status {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        html = response.text
        if not isinstance(html, str) or not html:
            raise SearchNetworkError(
                "Search engine returned empty response",
                url=url,
                status_code=response.status_code,
            )

        return html


def _message(error: Exception, url: str) -> str:
    if isinstance(error, SearchNetworkError):
        message = error.user_message
    else:
        message = str(error) or error.__class__.__name__
    return message.replace(url, redact_url(url))
