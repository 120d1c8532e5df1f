"""Selector-driven extraction of search results from a result page."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from lxml import etree, html
from lxml.cssselect import CSSSelector

from web_search_mcp.base import SearchResult
from web_search_mcp.logs import EventLogger
from web_search_mcp.text import FALLBACK_SNIPPET, clean_snippet, sanitize_text
from web_search_mcp.urls import ENGINE_DOMAIN, clean_url, decode_redirect, is_result_url

logger = logging.getLogger(__name__)
_events = EventLogger(logger)


@dataclass(frozen=True)
class SelectorSet:
    """Ordered CSS selector candidates per field; earlier entries win."""

    containers: tuple[str, ...]
    title: tuple[str, ...]
    url: tuple[str, ...]
    snippet: tuple[str, ...]


class SelectorExtractor:
    """Stateless: every method works only on its arguments."""

    @staticmethod
    def extract(
        html_text: str,
        selectors: SelectorSet,
        max_results: int,
        *,
        engine_domain: str = ENGINE_DOMAIN,
        url_decoder: Callable[[str], str] = decode_redirect,
        fallback_snippet: str = FALLBACK_SNIPPET,
        events: EventLogger | None = None,
    ) -> list[SearchResult]:
        events = events or _events
        if max_results < 1:
            return []

        try:
            tree = _parse(html_text)
        except etree.ParserError as exc:
            events.warning("extract_unparsable", error=exc)
            return []

        selector, containers = SelectorExtractor.find_containers(
            tree, selectors.containers
        )
        if not containers:
            events.warning(
                "extract_no_containers",
                html_length=len(html_text),
                candidates=len(selectors.containers),
            )
            return []

        results: list[SearchResult] = []
        skipped = 0
        for container in containers:
            if len(results) >= max_results:
                break

            result = SelectorExtractor.extract_result(
                container,
                selectors,
                engine_domain=engine_domain,
                url_decoder=url_decoder,
                fallback_snippet=fallback_snippet,
            )
            if result is None:
                skipped += 1
                continue
            results.append(result)

        events.info(
            "extract_complete",
            container_selector=selector,
            containers=len(containers),
            results=len(results),
            skipped=skipped,
        )
        return results

    @staticmethod
    def find_containers(
        tree: html.HtmlElement, candidates: tuple[str, ...]
    ) -> tuple[str | None, list[html.HtmlElement]]:
        """Return the first candidate selector with matches, and its matches."""
        for candidate in candidates:
            matches = _compile(candidate)(tree)
            if matches:
                return candidate, matches
        return None, []

    @staticmethod
    def extract_result(
        container: html.HtmlElement,
        selectors: SelectorSet,
        *,
        engine_domain: str = ENGINE_DOMAIN,
        url_decoder: Callable[[str], str] = decode_redirect,
        fallback_snippet: str = FALLBACK_SNIPPET,
    ) -> SearchResult | None:
        title = SelectorExtractor.extract_title(container, selectors.title)
        if title is None:
            logger.debug("Skipping result: no title")
            return None

        url = SelectorExtractor.extract_url(
            container, selectors.url, engine_domain=engine_domain, url_decoder=url_decoder
        )
        if url is None:
            logger.debug("Skipping result: no usable link")
            return None

        snippet = SelectorExtractor.extract_snippet(container, selectors.snippet)
        return SearchResult(title=title, url=url, snippet=snippet or fallback_snippet)

    @staticmethod
    def extract_title(
        container: html.HtmlElement, candidates: tuple[str, ...]
    ) -> str | None:
        return _first_text(container, candidates, sanitize_text)

    @staticmethod
    def extract_snippet(
        container: html.HtmlElement, candidates: tuple[str, ...]
    ) -> str | None:
        return _first_text(container, candidates, clean_snippet)

    @staticmethod
    def extract_url(
        container: html.HtmlElement,
        candidates: tuple[str, ...],
        *,
        engine_domain: str = ENGINE_DOMAIN,
        url_decoder: Callable[[str], str] = decode_redirect,
    ) -> str | None:
        for candidate in candidates:
            matches = _compile(candidate)(container)
            if not matches:
                continue
            href = (matches[0].get("href") or "").strip()
            if not href:
                continue
            url = url_decoder(href)
            if is_result_url(url, engine_domain):
                return clean_url(url)
        return None


def _first_text(
    container: html.HtmlElement,
    candidates: tuple[str, ...],
    normalize: Callable[[str], str],
) -> str | None:
    for candidate in candidates:
        matches = _compile(candidate)(container)
        if not matches:
            continue
        text = normalize(matches[0].text_content())
        if text:
            return text
    return None


def _parse(html_text: str) -> html.HtmlElement:
    try:
        return html.fromstring(html_text)
    except ValueError:
        # lxml refuses str input that carries an XML encoding declaration.
        return html.fromstring(html_text.encode("utf-8"))


@lru_cache(maxsize=128)
def _compile(selector: str) -> CSSSelector:
    return CSSSelector(selector)
