"""Turning shifts and assignments into resolved report entries."""

import datetime
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy.orm import Session, joinedload

from plantao.core.config import NO_SECTOR_NAME, VACANT_WORKER_ID, VACANT_WORKER_NAME
from plantao.core.logging_config import get_logger
from plantao.core.models import ResolvedEntry
from plantao.core.rates import classify_period, resolve
from plantao.core.time_utils import calculate_duration_hours
from plantao.core.types import UNPRICED, SectorId, ShiftId, TenantId, ValueSource, WorkerId
from plantao.database.database import RateOverride, Sector, Shift, ShiftAssignment

logger = get_logger(__name__)


def _vacant_entry(shift, sector) -> ResolvedEntry:
    # Base value is never counted for a shift nobody works
    return ResolvedEntry(
        id=shift.id,
        shift_id=shift.id,
        worker_id=VACANT_WORKER_ID,
        worker_name=VACANT_WORKER_NAME,
        sector_id=shift.sector_id,
        sector_name=getattr(sector, "name", None) or NO_SECTOR_NAME,
        date=shift.date,
        start_time=shift.start_time,
        end_time=shift.end_time,
        duration_hours=calculate_duration_hours(shift.start_time, shift.end_time),
        period=classify_period(shift.start_time),
        value=UNPRICED,
        source=ValueSource.NONE,
    )


def build_entries(
    shifts: Iterable,
    assignments: Iterable,
    sectors: Iterable = (),
    overrides: Iterable = (),
    include_vacant: bool = False,
) -> list[ResolvedEntry]:
    """
    Resolve every (assignment, shift) pairing.

    Args:
        shifts: shift records (``id``, ``date``, ``start_time``, ``end_time``,
            ``sector_id``, ``base_value``)
        assignments: assignment records (``id``, ``shift_id``, ``worker_id``,
            ``worker_name``, ``cached_value``)
        sectors: sector records with default values
        overrides: override records; the one matching sector, worker and the
            month/year of the shift date is used
        include_vacant: emit an unpriced row for shifts without assignment

    Returns:
        Entries ordered by date, start time and worker name
    """
    sectors_by_id = {sector.id: sector for sector in sectors}
    overrides_by_key = {(o.sector_id, o.worker_id, o.month, o.year): o for o in overrides}

    assignments_by_shift: dict[ShiftId, list] = defaultdict(list)
    for assignment in assignments:
        assignments_by_shift[assignment.shift_id].append(assignment)

    entries = []
    for shift in shifts:
        sector = sectors_by_id.get(shift.sector_id) if shift.sector_id is not None else None
        shift_assignments = assignments_by_shift.get(shift.id)

        if not shift_assignments:
            if include_vacant:
                entries.append(_vacant_entry(shift, sector))
            continue

        for assignment in shift_assignments:
            override = None
            if shift.sector_id is not None:
                key = (shift.sector_id, assignment.worker_id, shift.date.month, shift.date.year)
                override = overrides_by_key.get(key)
            entries.append(resolve(assignment, shift, sector, override))

    entries.sort(key=lambda e: (e.date, e.start_time, e.worker_name.casefold()))
    return entries


def load_entries(
    session: Session,
    tenant_id: TenantId,
    start: datetime.date,
    end: datetime.date,
    sector_id: SectorId | None = None,
    worker_id: WorkerId | None = None,
    include_vacant: bool = False,
) -> list[ResolvedEntry]:
    """
    Fetch shifts, assignments, sectors and overrides of a tenant for a date
    window (inclusive) and resolve them.

    Vacant shifts are never included when filtering on a worker.
    """
    if start > end:
        return []

    shift_query = session.query(Shift).filter(
        Shift.tenant_id == tenant_id,
        Shift.date >= start,
        Shift.date <= end,
    )
    if sector_id is not None:
        shift_query = shift_query.filter(Shift.sector_id == sector_id)
    shifts = shift_query.order_by(Shift.date, Shift.start_time, Shift.id).all()

    if not shifts:
        return []

    shift_ids = [shift.id for shift in shifts]
    assignment_query = (
        session.query(ShiftAssignment)
        .options(joinedload(ShiftAssignment.worker))
        .filter(ShiftAssignment.tenant_id == tenant_id, ShiftAssignment.shift_id.in_(shift_ids))
    )
    override_query = session.query(RateOverride).filter(
        RateOverride.tenant_id == tenant_id,
        RateOverride.year >= start.year,
        RateOverride.year <= end.year,
    )
    if sector_id is not None:
        override_query = override_query.filter(RateOverride.sector_id == sector_id)
    if worker_id is not None:
        assignment_query = assignment_query.filter(ShiftAssignment.worker_id == worker_id)
        override_query = override_query.filter(RateOverride.worker_id == worker_id)

    assignments = assignment_query.order_by(ShiftAssignment.id).all()
    sectors = session.query(Sector).filter(Sector.tenant_id == tenant_id).all()
    overrides = override_query.all()

    entries = build_entries(
        shifts,
        assignments,
        sectors,
        overrides,
        include_vacant=include_vacant and worker_id is None,
    )

    logger.debug(
        f"Resolved {len(entries)} entries for tenant {tenant_id} ({start} - {end})",
        extra={"extra_fields": {"shifts": len(shifts), "assignments": len(assignments), "overrides": len(overrides)}},
    )
    return entries
