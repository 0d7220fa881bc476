"""Clock abstraction and date parsing for date-anchored queries."""

from datetime import date, datetime
from typing import Optional, Protocol

# Accepted explicit anchor formats, tried in order after ISO parsing.
ANCHOR_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%B %d, %Y", "%b %d, %Y")


class Clock(Protocol):
    """Anything that can say what day it is."""

    def today(self) -> date:
        ...


class SystemClock:
    """Wall-clock implementation, local calendar date."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to one date (tests, replays)."""

    def __init__(self, fixed: date):
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed


def parse_date(value: str) -> Optional[date]:
    """
    Parse a caller-supplied date string.

    Accepts ISO dates (2024-05-12), ISO datetimes (2024-05-12T08:00:00Z)
    and the US style 05/12/2024 the web client historically sent.

    Args:
        value: Date string (already known to be non-empty)

    Returns:
        The calendar date, or None if no supported format matches
    """
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in ANCHOR_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
