"""Calendar windows for "born this day/week/month" queries.

Windows are expressed on birth month and birth day only, so they match
people born in any year. Weeks run Sunday through Saturday.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from ..errors import InvalidRequestError
from ..utils.time import Clock, SystemClock, parse_date
from .models import DateRange, Granularity

# Month windows always use 31 as the upper day. No stored birth day exceeds
# its month's real length, so the bound never admits a wrong record.
MONTH_DAY_CEILING = 31


def resolve_anchor(value: Optional[str], clock: Optional[Clock] = None) -> date:
    """
    Resolve the anchor date for a window.

    Args:
        value: Explicit date string from the caller; None/blank means today
        clock: Source of "today" (defaults to the system clock)

    Returns:
        Anchor date

    Raises:
        InvalidRequestError: If an explicit value cannot be parsed
    """
    if value is None or not str(value).strip():
        return (clock or SystemClock()).today()
    parsed = parse_date(str(value))
    if parsed is None:
        raise InvalidRequestError(f"Unrecognized date: {value!r}")
    return parsed


def _sunday_index(day: date) -> int:
    # date.weekday() counts from Monday; windows count from Sunday
    return (day.weekday() + 1) % 7


def resolve_day(anchor: date) -> List[DateRange]:
    return [DateRange(month=anchor.month, day_low=anchor.day, day_high=anchor.day)]


def resolve_week(anchor: date) -> List[DateRange]:
    """
    Sunday-Saturday week containing the anchor.

    Returns one range, or two when the week spans a month boundary (the tail
    of the first month and the head of the next).
    """
    start = anchor - timedelta(days=_sunday_index(anchor))
    end = start + timedelta(days=6)
    if start.month == end.month:
        return [DateRange(month=start.month, day_low=start.day, day_high=end.day)]
    return [
        DateRange(month=start.month, day_low=start.day, day_high=MONTH_DAY_CEILING),
        DateRange(month=end.month, day_low=1, day_high=end.day),
    ]


def resolve_month(anchor: date) -> List[DateRange]:
    return [DateRange(month=anchor.month, day_low=1, day_high=MONTH_DAY_CEILING)]


def resolve_window(granularity: Granularity, anchor: date) -> List[DateRange]:
    if granularity == Granularity.DAY:
        return resolve_day(anchor)
    if granularity == Granularity.WEEK:
        return resolve_week(anchor)
    return resolve_month(anchor)


def range_filter(date_range: DateRange) -> str:
    if date_range.day_low == date_range.day_high:
        return f"(birthMonth eq {date_range.month} and birthDay eq {date_range.day_low})"
    return (
        f"(birthMonth eq {date_range.month} and birthDay ge {date_range.day_low}"
        f" and birthDay le {date_range.day_high})"
    )


def window_filter(ranges: Sequence[DateRange]) -> Optional[str]:
    """
    Render resolved ranges as one parenthesized predicate.

    Multiple ranges are OR'd and wrapped again so the group stays a single
    conjunct when AND'd with facet filters.
    """
    if not ranges:
        return None
    if len(ranges) == 1:
        return range_filter(ranges[0])
    return "(" + " or ".join(range_filter(r) for r in ranges) + ")"
