from __future__ import annotations

from typing import Literal

import httpx
from lxml import etree

from web_search_mcp.base import NO_RESULTS_MESSAGE

NetworkErrorKind = Literal["generic", "timeout", "proxy"]


class SearchError(Exception):
    category = "unknown"

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class SearchValidationError(SearchError):
    category = "validation"


class SearchNetworkError(SearchError):
    category = "network"

    def __init__(
        self,
        user_message: str,
        *,
        kind: NetworkErrorKind = "generic",
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(user_message)
        self.kind = kind
        self.url = url
        self.status_code = status_code


class NoResultsError(SearchError):
    category = "no_results"

    def __init__(self, user_message: str = NO_RESULTS_MESSAGE) -> None:
        super().__init__(user_message)


class UnknownSearchError(SearchError):
    category = "unknown"


def classify_error(exc: Exception, *, url: str | None = None) -> SearchError | None:
    """Map an operational exception onto the search error taxonomy.

    Returns ``None`` for anything that is not a known operational failure so
    callers can re-raise programming defects untouched.
    """
    if isinstance(exc, SearchError):
        return exc
    if isinstance(exc, httpx.HTTPError):
        return network_error(exc, url=url)
    if isinstance(exc, etree.ParserError):
        return UnknownSearchError(f"Could not parse search page: {exc}")
    return None


def network_error(exc: httpx.HTTPError, *, url: str | None = None) -> SearchNetworkError:
    if isinstance(exc, httpx.TimeoutException):
        return SearchNetworkError(
            f"Request timeout: {_describe(exc)}", kind="timeout", url=url
        )
    if isinstance(exc, httpx.ProxyError):
        return SearchNetworkError(
            f"Proxy error: {_describe(exc)}", kind="proxy", url=url
        )
    return SearchNetworkError(f"Network error: {_describe(exc)}", url=url)


def _describe(exc: Exception) -> str:
    detail = str(exc).strip()
    if not detail:
        return exc.__class__.__name__
    return f"{exc.__class__.__name__}: {detail}"
