from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

NO_RESULTS_MESSAGE = "No results found"


@dataclass(frozen=True)
class SearchRequest:
    query: str
    max_results: int


@dataclass(frozen=True)
class SearchResult:
    title: str
    url: str
    snippet: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "snippet": self.snippet}


@dataclass(frozen=True)
class SearchResponse:
    """Outcome of one search call.

    A successful response always carries at least one result and
    ``result_count == len(results)``. Failures carry only ``error``.
    """

    success: bool
    query: str
    results: tuple[SearchResult, ...] = field(default=())
    error: str | None = None

    @classmethod
    def ok(cls, query: str, results: list[SearchResult]) -> SearchResponse:
        if not results:
            raise ValueError("A successful response needs at least one result")
        return cls(success=True, query=query, results=tuple(results))

    @classmethod
    def failure(cls, query: str, error: str) -> SearchResponse:
        return cls(success=False, query=query, error=error)

    @classmethod
    def no_results(cls, query: str) -> SearchResponse:
        return cls.failure(query, NO_RESULTS_MESSAGE)

    @property
    def result_count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "query": self.query, "error": self.error}
        return {
            "success": True,
            "query": self.query,
            "resultCount": self.result_count,
            "results": [result.to_dict() for result in self.results],
        }


@runtime_checkable
class SearchProvider(Protocol):
    name: str

    def is_available(self) -> bool: ...

    async def search(
        self, query: object, max_results: object = None
    ) -> SearchResponse: ...
