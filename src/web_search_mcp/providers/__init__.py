from web_search_mcp.providers.duckduckgo import DUCKDUCKGO_SELECTORS, DuckDuckGoProvider

__all__ = ["DUCKDUCKGO_SELECTORS", "DuckDuckGoProvider"]
