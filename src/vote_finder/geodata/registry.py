"""Provider registry for geodata backends."""

from typing import Any

from .base import GeodataProvider


class GeodataProviderRegistry:
    """Registry for discovering and instantiating geodata providers."""

    _providers: dict[str, type[GeodataProvider]] = {}

    @classmethod
    def register(cls, provider_class: type[GeodataProvider]) -> type[GeodataProvider]:
        """Decorator to register a geodata provider.

        Args:
            provider_class: GeodataProvider subclass to register

        Returns:
            The same provider class (for use as decorator)

        Example:
            @GeodataProviderRegistry.register
            class PostGISGeodataProvider(GeodataProvider):
                ...
        """
        provider_name = provider_class.provider_name.fget(None)  # type: ignore
        cls._providers[provider_name] = provider_class
        return provider_class

    @classmethod
    def get_provider(cls, name: str, config: Any) -> GeodataProvider:
        """Instantiate a provider by name.

        Args:
            name: Provider identifier (e.g., 'postgis', 'memory')
            config: Settings object to pass to provider constructor

        Returns:
            Instantiated GeodataProvider

        Raises:
            ValueError: If provider name is not registered
        """
        if name not in cls._providers:
            available = ", ".join(cls.list_providers())
            raise ValueError(f"Unknown geodata provider: {name}. Available providers: {available}")
        return cls._providers[name](config)

    @classmethod
    def list_providers(cls) -> list[str]:
        """List all registered provider names."""
        return sorted(cls._providers)
