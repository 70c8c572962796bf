import calendar
import datetime
import logging
from typing import Any

from plantao.core.types import Hours

logger = logging.getLogger(__name__)


def parse_time(value: Any) -> datetime.time:
    """Parse a shift time.

    Handles:
    1) str times: "HH:MM" or "HH:MM:SS"
    2) datetime.time objects
    3) error handling via logging + ValueError (no bare except)
    """
    if isinstance(value, datetime.time):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("Time is empty")

        try:
            if len(s.split(":")) == 2:
                return datetime.datetime.strptime(s, "%H:%M").time()
            return datetime.datetime.strptime(s, "%H:%M:%S").time()
        except ValueError as e:
            logger.debug("Failed parsing time string. value=%r", value)
            raise ValueError(f"Invalid time format: {value!r}") from e

    raise ValueError(f"Unsupported time type: {type(value).__name__}")


def calculate_duration_hours(start: Any, end: Any) -> Hours:
    """Hours between two shift times; an end at or before the start crosses midnight.

    Returns 0.0 when either side is missing or unparseable.
    """
    try:
        start_t = parse_time(start)
        end_t = parse_time(end)
    except ValueError:
        return 0.0

    day = datetime.date(2000, 1, 1)
    start_dt = datetime.datetime.combine(day, start_t)
    end_dt = datetime.datetime.combine(day, end_t)

    if end_dt <= start_dt:
        end_dt += datetime.timedelta(days=1)

    return (end_dt - start_dt).total_seconds() / 3600


def month_window(year: int, month: int) -> tuple[datetime.date, datetime.date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return datetime.date(year, month, 1), datetime.date(year, month, last_day)
