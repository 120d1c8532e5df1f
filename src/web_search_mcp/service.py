from __future__ import annotations

import asyncio
import logging

from web_search_mcp.base import SearchProvider, SearchResponse
from web_search_mcp.errors import SearchValidationError
from web_search_mcp.logs import EventLogger
from web_search_mcp.validator import SearchValidator

logger = logging.getLogger(__name__)


class SearchService:
    """Front door for tool calls: validate, check the provider, bound the time."""

    def __init__(
        self,
        *,
        provider: SearchProvider,
        validator: SearchValidator | None = None,
        timeout_seconds: float = 30.0,
        events: EventLogger | None = None,
    ) -> None:
        self._provider = provider
        self._validator = validator or SearchValidator()
        self._timeout_seconds = timeout_seconds
        self._events = events or EventLogger(logger)

    @property
    def provider(self) -> SearchProvider:
        return self._provider

    @property
    def validator(self) -> SearchValidator:
        return self._validator

    def status(self) -> dict[str, object]:
        return {
            "available": self._provider.is_available(),
            "provider": self._provider.name,
        }

    async def search(self, query: object, max_results: object = None) -> SearchResponse:
        try:
            request = self._validator.validate(query, max_results)
        except SearchValidationError as exc:
            return SearchResponse.failure(
                query if isinstance(query, str) else "", exc.user_message
            )

        if not self._provider.is_available():
            return SearchResponse.failure(
                request.query,
                f'Search provider "{self._provider.name}" is not available',
            )

        try:
            async with asyncio.timeout(self._timeout_seconds):
                response = await self._provider.search(
                    request.query, request.max_results
                )
        except TimeoutError:
            self._events.error(
                "search_timeout",
                provider=self._provider.name,
                query=request.query,
                timeout_seconds=self._timeout_seconds,
            )
            return SearchResponse.failure(
                request.query,
                f"Search timed out after {self._timeout_seconds:g} seconds",
            )

        self._events.info(
            "search_served",
            provider=self._provider.name,
            query=request.query,
            success=response.success,
            result_count=response.result_count,
        )
        return response
