"""Jurisdiction calendar: which search algorithm applies on a given date."""

from datetime import date
from enum import Enum

from vote_finder.places import Jurisdiction


class SearchMode(Enum):
    """The two search algorithms."""

    ELECTION_DAY = "election_day"
    EARLY_VOTING = "early_voting"


def branch_for(jurisdiction: Jurisdiction, reference_date: date) -> SearchMode:
    """Pick the search algorithm for ``reference_date``.

    The last day of early voting still uses the early voting algorithm.
    """
    if reference_date > jurisdiction.early_voting_end_date:
        return SearchMode.ELECTION_DAY
    return SearchMode.EARLY_VOTING


def is_historical(jurisdiction: Jurisdiction, reference_date: date) -> bool:
    """True once election day has passed."""
    return reference_date > jurisdiction.election_day_date


def format_election_date(jurisdiction: Jurisdiction) -> str:
    """Election day as shown to voters, e.g. ``Nov 05, 2024``."""
    return jurisdiction.election_day_date.strftime("%b %d, %Y")
