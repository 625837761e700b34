"""Open/closed evaluation for voting place schedules.

Two rules are in use:

- INTERVAL: open while the reference time falls inside any schedule entry,
  treating each entry as ``[opens, closes)``. Used for election day and
  fixed early voting places, whose entries are individual days.
- THRESHOLD: open once the reference time has reached ``opens``. Used for
  mobile early voting places, whose single entry spans the whole period the
  site operates; sites that have finally closed are filtered out before
  this rule is applied.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence


class OpenRule(Enum):
    """How a place's schedule decides whether it is open."""

    INTERVAL = "interval"
    THRESHOLD = "threshold"


@dataclass(frozen=True)
class ScheduleEntry:
    """One opening period of a voting schedule."""

    opens: datetime
    closes: datetime
    schedule_id: str | None = None

    def __post_init__(self) -> None:
        if self.closes < self.opens:
            raise ValueError(f"schedule entry closes ({self.closes}) before it opens ({self.opens})")

    def contains(self, moment: datetime) -> bool:
        """True if ``moment`` falls in ``[opens, closes)``."""
        return self.opens <= moment < self.closes


def is_open(entries: Iterable[ScheduleEntry], reference_time: datetime) -> bool:
    """Return True if any entry is open at ``reference_time``."""
    return any(entry.contains(reference_time) for entry in entries)


def has_opened(opens: datetime, reference_time: datetime) -> bool:
    """Return True once ``reference_time`` has reached ``opens``."""
    return reference_time >= opens


def evaluate(rule: OpenRule, entries: Sequence[ScheduleEntry], reference_time: datetime) -> bool:
    """Apply ``rule`` to a schedule.

    Args:
        rule: Which open rule to apply
        entries: The place's schedule entries
        reference_time: The moment being asked about

    Returns:
        True if the place counts as open at ``reference_time``
    """
    if rule is OpenRule.INTERVAL:
        return is_open(entries, reference_time)
    if not entries:
        return False
    return has_opened(min(entry.opens for entry in entries), reference_time)
