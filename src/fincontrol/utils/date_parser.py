"""Date parsing utilities."""

from datetime import date, datetime, time, tzinfo
from typing import Optional, Sequence

from dateutil import parser as date_parser
from dateutil import tz


def parse_date(date_str: str, patterns: Sequence[str]) -> datetime:
    """Parse a statement date using the first pattern that matches.

    Patterns are strptime formats tried in the order given. Date-only values
    become midnight of that day.

    Args:
        date_str: Date string as found in the statement
        patterns: strptime patterns, e.g. ``["%d/%m/%Y", "%Y-%m-%d"]``

    Returns:
        Naive datetime

    Raises:
        ValueError: If the value is blank or no pattern matches
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date value is missing")

    value = date_str.strip()
    for pattern in patterns:
        try:
            return datetime.strptime(value, pattern)
        except ValueError:
            continue

    raise ValueError(f'Unable to parse date "{value}" using configured patterns')


def to_zone(moment: datetime, zone: tzinfo) -> datetime:
    """Convert a UTC timestamp into wall-clock time of ``zone``.

    Naive inputs are read as UTC; the result is naive so it can be stored
    as-is.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz.UTC)
    return moment.astimezone(zone).replace(tzinfo=None)


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Return the first and last instant of the calendar day of ``moment``."""
    day = moment.date()
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def parse_cli_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a free-form date given on the command line ("2024-01-15", "Jan 15 2024")."""
    if date_str is None:
        return None
    try:
        return date_parser.parse(date_str.strip()).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
