"""Individual (per worker, per month) sector values and sector defaults.

Overrides are unique per (tenant, sector, worker, month, year). A row is
deleted only when both values are unset; a row holding a zero stays.
Every write is committed before the matching cache sweep runs.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from plantao.core.config import OVERRIDE_MAX_YEAR, OVERRIDE_MIN_YEAR
from plantao.core.invalidation import invalidate_sector, on_override_changed
from plantao.core.logging_config import LogContext, get_logger
from plantao.core.models import InvalidationResult, OverrideSaveResult, OverrideScope
from plantao.core.models import RateOverride as RateOverrideModel
from plantao.core.rates import explicit_amount
from plantao.core.types import MonetaryAmount, Month, SectorId, TenantId, WorkerId, Year
from plantao.database.database import RateOverride, Sector

logger = get_logger(__name__)


def _validate_scope(month: Month, year: Year) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    if not OVERRIDE_MIN_YEAR <= year <= OVERRIDE_MAX_YEAR:
        raise ValueError(f"Invalid year: {year}")


def _validate_amount(name: str, value) -> MonetaryAmount | None:
    if value is None:
        return None
    amount = explicit_amount(value)
    if amount is None:
        raise ValueError(f"{name} is not a number: {value!r}")
    if amount < 0:
        raise ValueError(f"{name} cannot be negative")
    return amount


def _find_override(session: Session, scope: OverrideScope) -> RateOverride | None:
    return (
        session.query(RateOverride)
        .filter(
            RateOverride.tenant_id == scope.tenant_id,
            RateOverride.sector_id == scope.sector_id,
            RateOverride.worker_id == scope.worker_id,
            RateOverride.month == scope.month,
            RateOverride.year == scope.year,
        )
        .first()
    )


def get_overrides(
    session: Session, tenant_id: TenantId, sector_id: SectorId, month: Month, year: Year
) -> list[RateOverrideModel]:
    """All overrides of a sector for one month, ordered by worker."""
    records = (
        session.query(RateOverride)
        .filter(
            RateOverride.tenant_id == tenant_id,
            RateOverride.sector_id == sector_id,
            RateOverride.month == month,
            RateOverride.year == year,
        )
        .order_by(RateOverride.worker_id)
        .all()
    )
    return [RateOverrideModel.model_validate(r) for r in records]


def _upsert(session: Session, scope: OverrideScope, day_value, night_value, updated_by) -> RateOverride:
    record = _find_override(session, scope)
    if record is None:
        record = RateOverride(**scope.model_dump())
        session.add(record)
    record.day_value = day_value
    record.night_value = night_value
    record.updated_by = updated_by
    session.commit()
    return record


def save_override(
    session: Session,
    tenant_id: TenantId,
    sector_id: SectorId,
    worker_id: WorkerId,
    month: Month,
    year: Year,
    day_value: MonetaryAmount | None,
    night_value: MonetaryAmount | None,
    updated_by: int | None = None,
) -> OverrideSaveResult:
    """
    Upsert or delete an individual value, then clear the stale cached values.

    Args:
        session: SQLAlchemy session
        tenant_id, sector_id, worker_id, month, year: override key
        day_value: value for day shifts, None = unset (0 is a valid value)
        night_value: value for night shifts, None = unset (0 is a valid value)
        updated_by: id of the admin making the change

    Returns:
        OverrideSaveResult. An invalidation failure does not undo the write;
        it is reported in ``result.invalidation.warning``.

    Raises:
        ValueError: invalid month/year or negative/non-numeric value
    """
    _validate_scope(month, year)
    day_value = _validate_amount("day_value", day_value)
    night_value = _validate_amount("night_value", night_value)

    scope = OverrideScope(tenant_id=tenant_id, sector_id=sector_id, worker_id=worker_id, month=month, year=year)

    with LogContext(tenant_id=tenant_id, sector_id=sector_id, worker_id=worker_id):
        saved = None
        deleted = False

        if day_value is None and night_value is None:
            record = _find_override(session, scope)
            if record is not None:
                session.delete(record)
                session.commit()
                deleted = True
                logger.info(f"Override removed for worker {worker_id} ({month:02d}/{year})")
        else:
            try:
                record = _upsert(session, scope, day_value, night_value, updated_by)
            except IntegrityError:
                # Another request inserted the same key first
                session.rollback()
                record = _upsert(session, scope, day_value, night_value, updated_by)
            saved = RateOverrideModel.model_validate(record)
            logger.info(
                f"Override saved for worker {worker_id} ({month:02d}/{year})",
                extra={"extra_fields": {"day_value": day_value, "night_value": night_value}},
            )

        invalidation = on_override_changed(session, scope)

    return OverrideSaveResult(override=saved, deleted=deleted, invalidation=invalidation)


def update_sector_defaults(
    session: Session,
    tenant_id: TenantId,
    sector_id: SectorId,
    default_day_value: MonetaryAmount | None,
    default_night_value: MonetaryAmount | None,
    apply_to_existing: bool = False,
    updated_by: int | None = None,
) -> InvalidationResult | None:
    """
    Set a sector's default day/night values.

    With apply_to_existing, cached values of every assignment in the sector
    are cleared so existing shifts pick up the new defaults.

    Raises:
        LookupError: unknown sector for this tenant
        ValueError: negative or non-numeric value
    """
    day_value = _validate_amount("default_day_value", default_day_value)
    night_value = _validate_amount("default_night_value", default_night_value)

    sector = session.query(Sector).filter(Sector.id == sector_id, Sector.tenant_id == tenant_id).first()
    if sector is None:
        raise LookupError(f"Sector {sector_id} not found")

    sector.default_day_value = day_value
    sector.default_night_value = night_value
    sector.updated_by = updated_by
    session.commit()
    logger.info(f"Default values updated for sector {sector_id} (day={day_value}, night={night_value})")

    if not apply_to_existing:
        return None
    return invalidate_sector(session, tenant_id, sector_id)
