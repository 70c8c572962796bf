# plantao/routes/shared.py
"""
Shared request schemas and helpers for route modules.
"""

from fastapi import HTTPException, status
from pydantic import BaseModel, field_validator

from plantao.core.rates import parse_money


def _money_field(value):
    """Accept numbers or pt-BR formatted strings; blank means unset, "0,00" is zero."""
    if value is None:
        return None
    parsed = parse_money(value)
    if parsed is None and not (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Invalid money value: {value!r}")
    return parsed


# ============ Pydantic schemas ============


class OverrideUpdate(BaseModel):
    day_value: float | None = None
    night_value: float | None = None

    @field_validator("day_value", "night_value", mode="before")
    @classmethod
    def parse_value(cls, value):
        return _money_field(value)


class SectorDefaultsUpdate(BaseModel):
    default_day_value: float | None = None
    default_night_value: float | None = None
    apply_to_existing: bool = False

    @field_validator("default_day_value", "default_night_value", mode="before")
    @classmethod
    def parse_value(cls, value):
        return _money_field(value)


def bad_request(error: Exception) -> HTTPException:
    """Translate a domain ValueError into HTTP 400."""
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
