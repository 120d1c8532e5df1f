"""URL helpers: redirect unwrapping, validation, tracking cleanup and redaction."""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, unquote, urlencode, urljoin, urlsplit, urlunsplit

ENGINE_DOMAIN = "duckduckgo.com"

# //duckduckgo.com/l/?uddg=<target>&rut=..., absolute or host-relative.
_REDIRECT_WRAPPER = re.compile(
    r"^(?:(?:https?:)?//(?:[\w-]+\.)*duckduckgo\.com)?/l/\?(?:[^#]*?&)?uddg=([^&#]+)",
    re.IGNORECASE,
)

_TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "fbclid",
        "gclid",
        "msclkid",
    }
)

REDACTED = "[REDACTED]"


def decode_redirect(href: str) -> str:
    """Return the real destination behind a result-page link.

    Total function: wrapper links are unwrapped, protocol-relative links get an
    ``https:`` scheme, and anything else (including wrapper links whose target
    is not valid percent-encoded UTF-8) comes back unchanged. An unchanged
    return value does not mean the input was a wrapper link that failed.
    """
    if not href:
        return href

    match = _REDIRECT_WRAPPER.match(href)
    if match:
        try:
            return unquote(match.group(1), errors="strict")
        except UnicodeDecodeError:
            return href

    if href.startswith("//"):
        return "https:" + href

    return href


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.hostname)


def extract_domain(url: str) -> str:
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def is_engine_url(url: str, engine_domain: str = ENGINE_DOMAIN) -> bool:
    """True for links that point back at the engine itself.

    Matches the engine host and its subdomains, and any URL that mentions the
    engine domain at all.
    """
    domain = engine_domain.lower()
    host = extract_domain(url).lower()
    if host == domain or host.endswith("." + domain):
        return True
    return domain in url.lower()


def is_result_url(url: str, engine_domain: str = ENGINE_DOMAIN) -> bool:
    return is_valid_url(url) and not is_engine_url(url, engine_domain)


def clean_url(url: str) -> str:
    """Drop common click-tracking query parameters."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.query:
        return url

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if key.lower() not in _TRACKING_PARAMS]
    if len(kept) == len(pairs):
        return url
    return urlunsplit(parts._replace(query=urlencode(kept)))


def build_search_url(
    base_url: str,
    path: str,
    query: str,
    *,
    query_param: str = "q",
    extra_params: dict[str, str] | None = None,
) -> str:
    target = urljoin(base_url, path)
    params = {query_param: query}
    if extra_params:
        params.update(extra_params)
    separator = "&" if urlsplit(target).query else "?"
    return f"{target}{separator}{urlencode(params)}"


def redact_url(url: str, *, query_param: str = "q") -> str:
    """Replace the search terms in ``url`` for logging."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "[URL]"
    if not parts.query:
        return url

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    redacted = [
        (key, REDACTED if key == query_param else value) for key, value in pairs
    ]
    return urlunsplit(parts._replace(query=urlencode(redacted, safe="[]")))
