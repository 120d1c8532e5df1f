from __future__ import annotations

from web_search_mcp.base import SearchRequest
from web_search_mcp.errors import SearchValidationError

MAX_RESULTS_LIMIT = 20
DEFAULT_MAX_RESULTS = 10
MAX_QUERY_LENGTH = 1000


class SearchValidator:
    """Checks raw tool arguments and turns them into a SearchRequest.

    Runs before any network work, so a rejected request never costs a fetch.
    """

    def __init__(
        self,
        *,
        min_query_length: int = 1,
        max_query_length: int = MAX_QUERY_LENGTH,
        max_results_limit: int = MAX_RESULTS_LIMIT,
        default_max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        if not 1 <= default_max_results <= max_results_limit:
            raise ValueError("default_max_results must be within 1..max_results_limit")
        self.min_query_length = max(1, min_query_length)
        self.max_query_length = max_query_length
        self.max_results_limit = max_results_limit
        self.default_max_results = default_max_results

    def validate(self, query: object, max_results: object = None) -> SearchRequest:
        return SearchRequest(
            query=self._validate_query(query),
            max_results=self._validate_max_results(max_results),
        )

    def _validate_query(self, query: object) -> str:
        if not isinstance(query, str) or not query:
            raise SearchValidationError("Query must be a non-empty string")

        trimmed = query.strip()
        if not trimmed:
            raise SearchValidationError("Query cannot be empty or whitespace only")
        if len(trimmed) < self.min_query_length:
            raise SearchValidationError(
                f"Query must be at least {self.min_query_length} character(s)"
            )
        if len(trimmed) > self.max_query_length:
            raise SearchValidationError(
                f"Query must not exceed {self.max_query_length} characters"
            )
        return trimmed

    def _validate_max_results(self, max_results: object) -> int:
        if max_results is None:
            return self.default_max_results
        # bool is an int subclass; True must not mean "1 result".
        if isinstance(max_results, bool) or not isinstance(max_results, int):
            raise SearchValidationError("max_results must be an integer")
        if max_results < 1:
            raise SearchValidationError("max_results must be at least 1")
        if max_results > self.max_results_limit:
            raise SearchValidationError(
                f"max_results must not exceed {self.max_results_limit}"
            )
        return max_results
