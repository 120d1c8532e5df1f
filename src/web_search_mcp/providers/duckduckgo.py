"""DuckDuckGo provider backed by the no-JavaScript HTML endpoint."""

from __future__ import annotations

import logging

from web_search_mcp.base import SearchResponse
from web_search_mcp.config import Settings
from web_search_mcp.errors import (
    NoResultsError,
    SearchError,
    SearchNetworkError,
    SearchValidationError,
    classify_error,
)
from web_search_mcp.extractor import SelectorExtractor, SelectorSet
from web_search_mcp.fetcher import HtmlFetcher
from web_search_mcp.http_client import AsyncHttpClient
from web_search_mcp.logs import EventLogger
from web_search_mcp.registry import register
from web_search_mcp.retry import RetryPolicy
from web_search_mcp.urls import ENGINE_DOMAIN, decode_redirect, redact_url
from web_search_mcp.validator import SearchValidator

logger = logging.getLogger(__name__)

# Fallbacks are ordered most to least specific; the page layout changes
# without notice.
DUCKDUCKGO_SELECTORS = SelectorSet(
    containers=(
        ".web-result",
        ".result",
        ".web-result.result--news",
    ),
    title=(
        "a.result__a",
        "h2 a",
        "h3 a",
        "a",
    ),
    url=(
        "a.result__a",
        "h2 a",
        "h3 a",
        "a",
    ),
    snippet=(
        ".result__snippet",
        ".snippet",
        "p",
    ),
)


@register
class DuckDuckGoProvider:
    name = "duckduckgo"
    display_name = "DuckDuckGo"

    def __init__(
        self,
        *,
        fetcher: HtmlFetcher,
        validator: SearchValidator | None = None,
        selectors: SelectorSet = DUCKDUCKGO_SELECTORS,
        events: EventLogger | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._validator = validator or SearchValidator()
        self._selectors = selectors
        self._events = events or EventLogger(logger)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: AsyncHttpClient,
        events: EventLogger | None = None,
    ) -> DuckDuckGoProvider:
        events = events or EventLogger(logger, sanitize=settings.log_sanitize)
        fetcher = HtmlFetcher(
            http_client=http_client,
            base_url=settings.duckduckgo_base_url,
            path=settings.duckduckgo_html_path,
            extra_params={"kl": settings.duckduckgo_region},
            retry_policy=RetryPolicy(
                max_attempts=settings.search_retry_attempts,
                base_delay=settings.search_retry_delay_seconds,
            ),
            events=events.child("web_search_mcp.fetcher"),
        )
        return cls(
            fetcher=fetcher,
            validator=SearchValidator(default_max_results=settings.search_max_results),
            events=events,
        )

    @property
    def selectors(self) -> SelectorSet:
        return self._selectors

    def is_available(self) -> bool:
        return True

    async def search(self, query: object, max_results: object = None) -> SearchResponse:
        query_text = query if isinstance(query, str) else ""

        try:
            request = self._validator.validate(query, max_results)
        except SearchValidationError as exc:
            self._events.info(
                "search_rejected", provider=self.name, error=exc.user_message
            )
            return SearchResponse.failure(query_text, exc.user_message)

        self._events.info(
            "search_start",
            provider=self.name,
            query=request.query,
            max_results=request.max_results,
        )

        try:
            html_text = await self._fetcher.fetch(request.query, request.max_results)
            results = SelectorExtractor.extract(
                html_text,
                self._selectors,
                request.max_results,
                engine_domain=ENGINE_DOMAIN,
                url_decoder=decode_redirect,
                events=self._events,
            )
            if not results:
                raise NoResultsError()
        except Exception as exc:
            error = classify_error(exc)
            if error is None:
                raise
            return self._failure(request.query, error)

        results = results[: request.max_results]
        self._events.info(
            "search_complete",
            provider=self.name,
            query=request.query,
            result_count=len(results),
        )
        return SearchResponse.ok(request.query, results)

    def _failure(self, query: str, error: SearchError) -> SearchResponse:
        message = error.user_message
        if isinstance(error, SearchNetworkError) and error.url:
            logged = message.replace(error.url, redact_url(error.url))
        else:
            logged = message

        if isinstance(error, NoResultsError):
            self._events.warning("search_no_results", provider=self.name, query=query)
        else:
            self._events.error(
                "search_failed",
                provider=self.name,
                query=query,
                category=error.category,
                error=logged,
            )
        return SearchResponse.failure(query, message)
