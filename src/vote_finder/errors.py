"""Exception types raised by Vote Finder.

Expected not-found outcomes (a location outside every precinct, no early
voting site in range) are not exceptions; they show up as advisories or
empty place lists in the search result.
"""


class VoteFinderError(Exception):
    """Base class for Vote Finder errors."""


class ConfigurationError(VoteFinderError):
    """Raised for caller or setup mistakes: bad options, missing resources."""


class JurisdictionNotFoundError(ConfigurationError):
    """Raised when a search names a jurisdiction that does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f'jurisdiction "{key}" not found')


class PlaceNotFoundError(VoteFinderError):
    """Raised when a precinct has no usable election day voting place."""


class GeodataProviderError(VoteFinderError):
    """Raised when a geodata provider fails to answer a query.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
    """

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        self.message = message
        super().__init__(f"{provider_name}: {message}")
