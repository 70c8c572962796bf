"""Clearing of cached assignment values after rate changes.

A cached value wins over every other tier, so once an override or a sector
default changes, the cached amounts it produced are stale. The sweep sets them
back to NULL (never to 0); the next report resolves them again.

Sweeps are best effort: a database error is logged, reported to Sentry as a
warning and returned to the caller in the result, never raised. Clearing is
idempotent, so a failed or duplicated sweep can simply be run again.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from plantao.core.logging_config import LogContext, get_logger
from plantao.core.models import InvalidationResult, OverrideScope
from plantao.core.sentry_config import add_breadcrumb, capture_message
from plantao.core.time_utils import month_window
from plantao.core.types import AssignmentId, SectorId, TenantId, WorkerId
from plantao.database.database import Shift, ShiftAssignment

logger = get_logger(__name__)


def _clear_cached_values(session: Session, shift_filter, worker_id: WorkerId | None = None) -> list[AssignmentId]:
    """Set cached_value to NULL on matching assignments; return the ids that had one."""
    shift_ids = session.query(Shift.id).filter(*shift_filter)

    query = session.query(ShiftAssignment.id).filter(
        ShiftAssignment.shift_id.in_(shift_ids.scalar_subquery()),
        ShiftAssignment.cached_value.isnot(None),
    )
    if worker_id is not None:
        query = query.filter(ShiftAssignment.worker_id == worker_id)

    cleared_ids = [row.id for row in query.order_by(ShiftAssignment.id).all()]
    if cleared_ids:
        session.query(ShiftAssignment).filter(ShiftAssignment.id.in_(cleared_ids)).update(
            {ShiftAssignment.cached_value: None}, synchronize_session=False
        )
    session.commit()
    return cleared_ids


def _report_failure(error: Exception, context: dict) -> str:
    warning = f"Cached values could not be cleared: {error}"
    logger.warning(warning, extra={"extra_fields": context}, exc_info=True)
    capture_message(warning, level="warning", context={"invalidation": context})
    return warning


def on_override_changed(session: Session, scope: OverrideScope) -> InvalidationResult:
    """
    Clear cached values of one worker in one sector for one month.

    Must run after the override write has been committed.

    Args:
        session: SQLAlchemy session
        scope: tenant, sector, worker, month and year of the changed override

    Returns:
        InvalidationResult with the ids of the assignments whose cache was
        cleared. A second run for the same scope clears nothing.
    """
    first_day, last_day = month_window(scope.year, scope.month)
    context = scope.model_dump()

    with LogContext(tenant_id=scope.tenant_id, sector_id=scope.sector_id, worker_id=scope.worker_id):
        try:
            cleared_ids = _clear_cached_values(
                session,
                (
                    Shift.tenant_id == scope.tenant_id,
                    Shift.sector_id == scope.sector_id,
                    Shift.date >= first_day,
                    Shift.date <= last_day,
                ),
                worker_id=scope.worker_id,
            )
        except SQLAlchemyError as e:
            session.rollback()
            return InvalidationResult(scope=scope, completed=False, warning=_report_failure(e, context))

        logger.info(
            f"Cleared {len(cleared_ids)} cached value(s) for worker {scope.worker_id} "
            f"in sector {scope.sector_id} ({scope.month:02d}/{scope.year})",
            extra={"extra_fields": {**context, "cleared": len(cleared_ids)}},
        )
        add_breadcrumb("cached values cleared", category="invalidation", data={**context, "cleared": len(cleared_ids)})

    return InvalidationResult(scope=scope, cleared_ids=cleared_ids)


def invalidate_sector(session: Session, tenant_id: TenantId, sector_id: SectorId) -> InvalidationResult:
    """Clear every cached value in a sector, e.g. after its defaults changed."""
    context = {"tenant_id": tenant_id, "sector_id": sector_id}

    try:
        cleared_ids = _clear_cached_values(session, (Shift.tenant_id == tenant_id, Shift.sector_id == sector_id))
    except SQLAlchemyError as e:
        session.rollback()
        return InvalidationResult(sector_id=sector_id, completed=False, warning=_report_failure(e, context))

    logger.info(
        f"Cleared {len(cleared_ids)} cached value(s) in sector {sector_id}",
        extra={"extra_fields": {**context, "cleared": len(cleared_ids)}},
    )
    return InvalidationResult(sector_id=sector_id, cleared_ids=cleared_ids)
