"""Per-shift value resolution with fallback to sector and shift defaults.

Precedence, first explicit value wins:
    1. assignment.cached_value   (pinned by an admin, survives recomputation)
    2. override day/night value  (sector + worker + month + year)
    3. sector default day/night value
    4. shift.base_value          (only when > 0)
    5. unpriced

Zero is an explicit value on tiers 1-3. On tier 4 a zero base value means
"not filled in yet" and falls through. A negative value on the winning tier
is invalid: the entry is unpriced and carries an ``invalid_reason``.

Records are read through attribute access, so pydantic models and ORM rows
are both accepted. Nothing here raises: bad input degrades to the next tier.
"""

from __future__ import annotations

import datetime
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from plantao.core.config import NIGHT_END_HOUR, NIGHT_START_HOUR, NO_SECTOR_NAME, UNNAMED_WORKER
from plantao.core.logging_config import get_logger
from plantao.core.models import ResolvedEntry
from plantao.core.time_utils import calculate_duration_hours, parse_time
from plantao.core.types import UNPRICED, EntryValue, Period, ValueSource

logger = get_logger(__name__)

_CURRENCY_PREFIX = re.compile(r"^R\$\s*")
# "1.234,56" / "800,00"
_DECIMAL_COMMA = re.compile(r"-?(?:\d{1,3}(?:\.\d{3})+|\d+),\d+")
# "1.234" / "1.234.567": dots group thousands
_THOUSANDS_ONLY = re.compile(r"-?\d{1,3}(?:\.\d{3})+")
# "800" / "800.00" / "1.5"
_PLAIN_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

# Attribute holding the value for each period, per tier
_OVERRIDE_FIELDS: dict[Period, str] = {Period.DAY: "day_value", Period.NIGHT: "night_value"}
_SECTOR_FIELDS: dict[Period, str] = {Period.DAY: "default_day_value", Period.NIGHT: "default_night_value"}


def explicit_amount(value: Any) -> float | None:
    """Return value as a float when it is explicitly set, None when unset.

    Zero stays zero. NaN, infinities and non-numeric values count as unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            amount = float(value)
        except (OverflowError, ValueError):
            return None
        return amount if math.isfinite(amount) else None
    return None


def parse_money(value: Any) -> float | None:
    """Parse a money value as typed in the admin screens.

    Accepts "800", "800.00", "800,00", "1.234,56" and an optional "R$"
    prefix. A dot followed by groups of exactly three digits with no decimal
    comma is a thousands separator, so "1.234" is 1234 while "1.5" is 1.5.
    Blank or malformed input is unset; "0" and "0,00" are an explicit zero.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return explicit_amount(value)

    raw = _CURRENCY_PREFIX.sub("", value.strip()).strip()
    if not raw:
        return None

    if _DECIMAL_COMMA.fullmatch(raw):
        normalized = raw.replace(".", "").replace(",", ".")
    elif _THOUSANDS_ONLY.fullmatch(raw):
        normalized = raw.replace(".", "")
    elif _PLAIN_NUMBER.fullmatch(raw):
        normalized = raw
    else:
        return None

    try:
        return explicit_amount(Decimal(normalized))
    except InvalidOperation:
        return None


def classify_period(start_time: Any) -> Period:
    """Day or night, from the start hour only.

    hour >= 18 or hour < 6 is night. A missing or unparseable start time is
    classified as day.
    """
    try:
        hour = parse_time(start_time).hour
    except ValueError:
        logger.warning(f"Unparseable shift start time {start_time!r}, classifying as day")
        return Period.DAY

    if hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR:
        return Period.NIGHT
    return Period.DAY


def _period_value(record: Any, fields: dict[Period, str], period: Period) -> float | None:
    if record is None:
        return None
    return explicit_amount(getattr(record, fields[period], None))


def _select(assignment: Any, shift: Any, sector: Any, override: Any, period: Period):
    """First explicit tier as (amount, source, field name), or None."""
    cached = explicit_amount(getattr(assignment, "cached_value", None))
    if cached is not None:
        return cached, ValueSource.CACHED, "cached_value"

    individual = _period_value(override, _OVERRIDE_FIELDS, period)
    if individual is not None:
        return individual, ValueSource.OVERRIDE, _OVERRIDE_FIELDS[period]

    sector_default = _period_value(sector, _SECTOR_FIELDS, period)
    if sector_default is not None:
        return sector_default, ValueSource.SECTOR_DEFAULT, _SECTOR_FIELDS[period]

    # Zero base value means "not filled in yet" on this tier
    base = explicit_amount(getattr(shift, "base_value", None))
    if base is not None and base != 0:
        return base, ValueSource.BASE_VALUE, "base_value"

    return None


def _resolve(assignment: Any, shift: Any, sector: Any, override: Any):
    period = classify_period(getattr(shift, "start_time", None))

    selected = _select(assignment, shift, sector, override, period)
    if selected is None:
        return UNPRICED, ValueSource.NONE, period, None

    amount, source, field = selected
    if amount < 0:
        reason = f"{field} is negative"
        logger.warning(
            f"Invalid value for assignment {getattr(assignment, 'id', None)}: {reason}",
            extra={"extra_fields": {"field": field, "amount": amount}},
        )
        return UNPRICED, ValueSource.NONE, period, reason

    return amount, source, period, None


def resolve_value(
    assignment: Any, shift: Any, sector: Any = None, override: Any = None
) -> tuple[EntryValue, ValueSource, Period]:
    """Resolve the value of one (worker, shift) pairing.

    Args:
        assignment: record with ``cached_value`` (may be None)
        shift: record with ``start_time`` and ``base_value``
        sector: record with ``default_day_value``/``default_night_value``, or None
        override: record with ``day_value``/``night_value`` matching the
            sector, worker, month and year of the shift, or None

    Returns:
        (value, source, period). A negative value on the winning tier
        resolves to (UNPRICED, NONE, period).
    """
    value, source, period, _ = _resolve(assignment, shift, sector, override)
    return value, source, period


def resolve(assignment: Any, shift: Any, sector: Any = None, override: Any = None) -> ResolvedEntry:
    """Resolve one pairing into a report entry."""
    value, source, period, invalid_reason = _resolve(assignment, shift, sector, override)

    start_time = getattr(shift, "start_time", None)
    end_time = getattr(shift, "end_time", None)

    return ResolvedEntry(
        id=assignment.id,
        shift_id=shift.id,
        worker_id=assignment.worker_id,
        worker_name=getattr(assignment, "worker_name", None) or UNNAMED_WORKER,
        sector_id=getattr(shift, "sector_id", None),
        sector_name=getattr(sector, "name", None) or NO_SECTOR_NAME,
        date=shift.date,
        start_time=_time_or_midnight(start_time),
        end_time=_time_or_midnight(end_time),
        duration_hours=calculate_duration_hours(start_time, end_time),
        period=period,
        value=value,
        source=source,
        invalid_reason=invalid_reason,
    )


def _time_or_midnight(value: Any) -> datetime.time:
    try:
        return parse_time(value)
    except ValueError:
        return datetime.time(0, 0)
