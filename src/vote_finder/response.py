"""Search result assembly."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vote_finder.places import District, DistrictKind, Jurisdiction, Place


class Severity(Enum):
    """Severity of an advisory message."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Message:
    """An advisory shown with the search result."""

    severity: Severity
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"severity": self.severity.value, "text": self.text}


@dataclass
class SearchResult:
    """Places found for a search, with districts and advisories.

    Built up by one search call and handed to the caller; never shared
    between searches.
    """

    jurisdiction: Jurisdiction
    places: list[Place] = field(default_factory=list)
    districts: dict[DistrictKind, District] = field(default_factory=dict)
    messages: list[Message] = field(default_factory=list)
    additional: dict[str, Any] = field(default_factory=dict)

    def add_place(self, place: Place) -> None:
        self.places.append(place)

    def add_district(self, district: District) -> None:
        self.districts[district.kind] = district

    def add_additional(self, key: str, value: Any) -> None:
        self.additional[key] = value

    def error(self, text: str) -> None:
        self.messages.append(Message(Severity.ERROR, text))

    def warning(self, text: str) -> None:
        self.messages.append(Message(Severity.WARNING, text))

    @property
    def errors(self) -> list[str]:
        return [m.text for m in self.messages if m.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [m.text for m in self.messages if m.severity is Severity.WARNING]

    def to_dict(self, max_region: int) -> dict[str, Any]:
        """Serialize for JSON output.

        Args:
            max_region: District regions longer than this many characters
                are replaced by ``True``

        Returns:
            JSON-ready dictionary
        """
        return {
            "jurisdiction": self.jurisdiction.to_dict(),
            "districts": {
                kind.value: district.to_dict(max_region)
                for kind, district in self.districts.items()
            },
            "places": [place.to_dict() for place in self.places],
            "messages": [message.to_dict() for message in self.messages],
            **self.additional,
        }
