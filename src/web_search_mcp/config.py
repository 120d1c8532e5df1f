from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from web_search_mcp import __version__
from web_search_mcp.http_client import DEFAULT_USER_AGENT
from web_search_mcp.validator import DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT

DEFAULT_SERVER_NAME = "web-search-mcp-server"
DEFAULT_DUCKDUCKGO_BASE_URL = "https://duckduckgo.com"
DEFAULT_DUCKDUCKGO_HTML_PATH = "/html/"
DEFAULT_DUCKDUCKGO_REGION = "us-en"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_PROXY_ENV_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")
_DEFAULT_PROXY_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class ProxyConfig:
    scheme: str
    host: str
    port: int

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class Settings:
    server_name: str = DEFAULT_SERVER_NAME
    server_version: str = __version__
    search_max_results: int = DEFAULT_MAX_RESULTS
    search_timeout_seconds: float = 30.0
    search_retry_attempts: int = 3
    search_retry_delay_seconds: float = 1.0
    duckduckgo_base_url: str = DEFAULT_DUCKDUCKGO_BASE_URL
    duckduckgo_html_path: str = DEFAULT_DUCKDUCKGO_HTML_PATH
    duckduckgo_region: str = DEFAULT_DUCKDUCKGO_REGION
    user_agent: str = DEFAULT_USER_AGENT
    random_user_agent: bool = False
    http_timeout_seconds: float = 30.0
    http_max_redirects: int = 5
    http2: bool = True
    proxy: ProxyConfig | None = None
    log_level: str = "INFO"
    log_sanitize: bool = True

    @classmethod
    def from_env(cls) -> Settings:
        base_url = os.getenv("DDG_BASE_URL", DEFAULT_DUCKDUCKGO_BASE_URL).strip()
        if urlsplit(base_url).scheme not in {"http", "https"}:
            raise RuntimeError("Invalid DDG_BASE_URL. Expected an http(s) URL.")

        html_path = os.getenv("DDG_HTML_PATH", DEFAULT_DUCKDUCKGO_HTML_PATH).strip()
        if not html_path.startswith("/"):
            raise RuntimeError("Invalid DDG_HTML_PATH. Expected a path starting with '/'.")

        return cls(
            server_name=_non_empty("MCP_SERVER_NAME", DEFAULT_SERVER_NAME),
            server_version=_non_empty("MCP_SERVER_VERSION", __version__),
            search_max_results=_parse_int_range(
                "MAX_RESULTS", DEFAULT_MAX_RESULTS, 1, MAX_RESULTS_LIMIT
            ),
            search_timeout_seconds=_parse_positive_float("SEARCH_TIMEOUT_SECONDS", 30.0),
            search_retry_attempts=_parse_int_range("SEARCH_RETRY_ATTEMPTS", 3, 1, 5),
            search_retry_delay_seconds=_parse_positive_float(
                "SEARCH_RETRY_DELAY_SECONDS", 1.0, allow_zero=True
            ),
            duckduckgo_base_url=base_url,
            duckduckgo_html_path=html_path,
            duckduckgo_region=_non_empty("DDG_REGION", DEFAULT_DUCKDUCKGO_REGION),
            user_agent=_non_empty("DDG_USER_AGENT", DEFAULT_USER_AGENT),
            random_user_agent=_parse_bool(os.getenv("DDG_RANDOM_USER_AGENT")),
            http_timeout_seconds=_parse_positive_float("HTTP_TIMEOUT_SECONDS", 30.0),
            http_max_redirects=_parse_int_range("HTTP_MAX_REDIRECTS", 5, 0, 20),
            http2=_parse_bool(os.getenv("HTTP2_ENABLED"))
            if os.getenv("HTTP2_ENABLED") is not None
            else True,
            proxy=proxy_from_env(),
            log_level=_parse_log_level(os.getenv("LOG_LEVEL")),
            log_sanitize=_parse_bool(os.getenv("LOG_SANITIZE"))
            if os.getenv("LOG_SANITIZE") is not None
            else True,
        )


def proxy_from_env() -> ProxyConfig | None:
    """Read the first proxy variable set, HTTPS before HTTP."""
    for key in _PROXY_ENV_VARS:
        value = os.getenv(key)
        if value and value.strip():
            return parse_proxy(value.strip(), source=key)
    return None


def parse_proxy(value: str, *, source: str = "proxy") -> ProxyConfig:
    raw = value if "://" in value else f"http://{value}"
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as exc:
        raise RuntimeError(f"Invalid {source}: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PROXY_PORTS or not parts.hostname:
        raise RuntimeError(f"Invalid {source}. Expected http(s)://host[:port].")

    return ProxyConfig(
        scheme=scheme,
        host=parts.hostname,
        port=port or _DEFAULT_PROXY_PORTS[scheme],
    )


def _non_empty(key: str, default: str) -> str:
    value = os.getenv(key)
    if value is None:
        return default
    stripped = value.strip()
    if not stripped:
        return default
    return stripped


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_range(key: str, default: int, minimum: int, maximum: int) -> int:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise RuntimeError(f"Invalid {key}. Expected an integer.") from exc
    if not minimum <= parsed <= maximum:
        raise RuntimeError(f"Invalid {key}. Expected a value in {minimum}..{maximum}.")
    return parsed


def _parse_positive_float(key: str, default: float, *, allow_zero: bool = False) -> float:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise RuntimeError(f"Invalid {key}. Expected a number.") from exc
    if parsed < 0 or (parsed == 0 and not allow_zero):
        raise RuntimeError(f"Invalid {key}. Expected a positive number.")
    return parsed


def _parse_log_level(value: str | None) -> str:
    if value is None or not value.strip():
        return "INFO"

    normalized = value.strip().upper()
    if normalized == "WARN":
        return "WARNING"
    if normalized in LOG_LEVELS:
        return normalized

    raise RuntimeError(
        "Invalid LOG_LEVEL. Expected one of: debug, info, warning, error."
    )
