"""Info window text for voting places."""

import html
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import quote

from vote_finder.places import PlaceRecord

DIRECTIONS_URL = "http://maps.google.com/?daddr={}"


@dataclass(frozen=True)
class ElectionText:
    """Election-wide text shown with every place.

    ``description`` is plain text and is escaped; ``info`` is trusted HTML
    supplied by the election administrator and is inserted as-is.
    """

    description: str = ""
    info: str = ""

    @classmethod
    def from_definitions(cls, definitions: Mapping[str, str]) -> "ElectionText":
        """Build from the election_definitions name/value pairs."""
        return cls(
            description=definitions.get("ELECTION_DESCRIPTION") or "",
            info=definitions.get("ELECTION_INFO") or "",
        )


def format_info(record: PlaceRecord, title: str, election: ElectionText) -> str:
    """Generate info window content for a voting place.

    Args:
        record: The stored voting place; must have a location
        title: Heading for the place (e.g. "Early voting location")
        election: Election-wide description and info text

    Returns:
        Newline-separated HTML fragment
    """
    loc = record.location
    if loc is None:
        raise ValueError(f"voting place {record.id} has no location")

    info = ["<b>" + html.escape(title) + "</b>"]
    if election.description:
        info.append("<i>" + html.escape(election.description) + "</i>")
        info.append("")

    address = f"{loc.name}, {loc.street}, {loc.city}, {loc.state} {loc.zip}"
    info.append(
        f'<a href="{DIRECTIONS_URL.format(quote(address))}" target="_blank">{html.escape(loc.name)}</a>'
    )
    info.append(html.escape(loc.street))
    info.append(html.escape(f"{loc.city}, {loc.state} {loc.zip}"))
    info.append("")
    info.append("Hours of operation:")
    info.extend("• " + line for line in html.escape(record.schedule_formatted).split("\n"))

    if record.notes:
        info.append("")
        info.append(html.escape(record.notes))

    if election.info:
        info.append("")
        info.append(election.info)

    return "\n".join(info)
