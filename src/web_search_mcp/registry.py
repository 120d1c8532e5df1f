from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from web_search_mcp.base import SearchProvider

if TYPE_CHECKING:
    from web_search_mcp.config import Settings
    from web_search_mcp.http_client import AsyncHttpClient
    from web_search_mcp.logs import EventLogger

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "duckduckgo"

_PROVIDERS: dict[str, type[SearchProvider]] = {}


def register(cls: type[SearchProvider]) -> type[SearchProvider]:
    """Decorator to register a search provider class under its ``name``."""
    if hasattr(cls, "name"):
        _PROVIDERS[cls.name.lower()] = cls
    return cls


def get_provider(name: str) -> type[SearchProvider]:
    """Get a provider class by name."""
    key = name.lower()
    if key not in _PROVIDERS:
        raise ValueError(
            f"Provider '{name}' not found. Available: {list(_PROVIDERS.keys())}"
        )
    return _PROVIDERS[key]


def list_providers() -> list[str]:
    """List available provider names."""
    return list(_PROVIDERS.keys())


def get_all_providers() -> dict[str, type[SearchProvider]]:
    return _PROVIDERS.copy()


class ProviderRegistry:
    """Live provider instances, looked up by case-insensitive name."""

    def __init__(self) -> None:
        self._providers: dict[str, SearchProvider] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: AsyncHttpClient,
        events: EventLogger | None = None,
        names: tuple[str, ...] = (DEFAULT_PROVIDER,),
    ) -> ProviderRegistry:
        # Importing the package registers the built-in providers.
        import web_search_mcp.providers  # noqa: F401

        registry = cls()
        for name in names:
            # Cast to Any because SearchProvider does not define from_settings
            provider_cls = cast(Any, get_provider(name))
            registry.add(
                provider_cls.from_settings(
                    settings, http_client=http_client, events=events
                )
            )
        return registry

    def add(self, provider: SearchProvider) -> None:
        self._providers[provider.name.lower()] = provider
        logger.info("provider_registered name=%s", provider.name)

    def get(self, name: str) -> SearchProvider | None:
        return self._providers.get(name.lower())

    def default(self) -> SearchProvider:
        provider = self.get(DEFAULT_PROVIDER)
        if provider is None:
            raise RuntimeError(
                f"Default provider ({DEFAULT_PROVIDER}) is not registered"
            )
        return provider

    def providers(self) -> list[SearchProvider]:
        return list(self._providers.values())

    def names(self) -> list[str]:
        return list(self._providers.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._providers

    def __len__(self) -> int:
        return len(self._providers)
