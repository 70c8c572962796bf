import datetime

from fastapi import HTTPException, status

from plantao.core.config import OVERRIDE_MAX_YEAR, OVERRIDE_MIN_YEAR

#: Longest window a single report request may cover.
MAX_REPORT_DAYS = 366


def validate_month_year(month: int, year: int) -> tuple[int, int]:
    """
    Ensure month is 1-12 and year within the supported range.

    Returns (month, year) if valid, otherwise raises HTTP 400.
    """
    if not 1 <= month <= 12 or not OVERRIDE_MIN_YEAR <= year <= OVERRIDE_MAX_YEAR:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid month/year",
        )
    return month, year


def validate_date_range(start: datetime.date, end: datetime.date) -> tuple[datetime.date, datetime.date]:
    """
    Validate a report window.

    - start must not be after end
    - the window may span at most MAX_REPORT_DAYS days
    """
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must not be after end",
        )
    if (end - start).days >= MAX_REPORT_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Report window exceeds {MAX_REPORT_DAYS} days",
        )
    return start, end
