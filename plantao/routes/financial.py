# plantao/routes/financial.py
"""
Financial report routes - admin report and per-worker view.
"""

import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from plantao.core.logging_config import get_logger
from plantao.core.models import FinancialReport
from plantao.core.report import aggregate_by_worker, build_financial_report, grand_totals, load_entries
from plantao.core.validators import validate_date_range
from plantao.database.database import Worker, get_db

logger = get_logger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}/financial", tags=["financial"])


@router.get("/report", response_model=FinancialReport)
async def financial_report(
    tenant_id: int,
    start: datetime.date,
    end: datetime.date,
    sector_id: int | None = None,
    worker_id: int | None = None,
    include_vacant: bool = False,
    db: Session = Depends(get_db),
):
    """
    Admin financial report: sectors -> workers -> entries, per-worker totals,
    grand totals and the audit trail of the summed entries.
    """
    validate_date_range(start, end)

    entries = load_entries(
        db,
        tenant_id,
        start,
        end,
        sector_id=sector_id,
        worker_id=worker_id,
        include_vacant=include_vacant,
    )
    report = build_financial_report(entries)

    if report.totals.unpriced:
        logger.info(
            f"Financial report for tenant {tenant_id} has {report.totals.unpriced} unpriced entries",
            extra={"extra_fields": {"start": str(start), "end": str(end)}},
        )
    return report


@router.get("/workers/{worker_id}")
async def worker_financial(
    tenant_id: int,
    worker_id: int,
    start: datetime.date,
    end: datetime.date,
    db: Session = Depends(get_db),
):
    """Per-worker financial page: own entries with totals and per-sector subtotals."""
    validate_date_range(start, end)

    worker = db.query(Worker).filter(Worker.id == worker_id, Worker.tenant_id == tenant_id).first()
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")

    entries = load_entries(db, tenant_id, start, end, worker_id=worker_id)
    by_worker = aggregate_by_worker(entries)

    return {
        "worker_id": worker.id,
        "worker_name": worker.name,
        "entries": [entry.model_dump(mode="json") for entry in entries],
        "sectors": [s.model_dump(mode="json") for s in by_worker[0].sectors] if by_worker else [],
        "totals": grand_totals(entries).model_dump(mode="json"),
    }
