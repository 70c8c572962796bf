# plantao/routes/overrides.py
"""
Sector value routes - individual monthly overrides and sector defaults.

Saving an override always answers 200 once the override itself is stored;
a failed cache sweep comes back as ``invalidation.warning``.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from plantao.core.models import OverrideSaveResult, RateOverride
from plantao.core.overrides import get_overrides, save_override, update_sector_defaults
from plantao.core.validators import validate_month_year
from plantao.database.database import Sector, Worker, get_db
from plantao.routes.shared import OverrideUpdate, SectorDefaultsUpdate, bad_request

router = APIRouter(prefix="/tenants/{tenant_id}/sectors/{sector_id}", tags=["sector values"])


def _get_sector_or_404(db: Session, tenant_id: int, sector_id: int) -> Sector:
    sector = db.query(Sector).filter(Sector.id == sector_id, Sector.tenant_id == tenant_id).first()
    if sector is None:
        raise HTTPException(status_code=404, detail="Sector not found")
    return sector


@router.get("/overrides", response_model=list[RateOverride])
async def list_overrides(
    tenant_id: int,
    sector_id: int,
    month: int,
    year: int,
    db: Session = Depends(get_db),
):
    validate_month_year(month, year)
    _get_sector_or_404(db, tenant_id, sector_id)
    return get_overrides(db, tenant_id, sector_id, month, year)


@router.put("/overrides/{worker_id}", response_model=OverrideSaveResult)
async def put_override(
    tenant_id: int,
    sector_id: int,
    worker_id: int,
    month: int,
    year: int,
    payload: OverrideUpdate,
    db: Session = Depends(get_db),
):
    """
    Set a worker's day/night value for one month.

    Blank values unset a field; when both are unset the override is removed.
    """
    validate_month_year(month, year)
    _get_sector_or_404(db, tenant_id, sector_id)

    worker = db.query(Worker).filter(Worker.id == worker_id, Worker.tenant_id == tenant_id).first()
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")

    try:
        return save_override(
            db,
            tenant_id,
            sector_id,
            worker_id,
            month,
            year,
            day_value=payload.day_value,
            night_value=payload.night_value,
        )
    except ValueError as e:
        raise bad_request(e) from e


@router.put("/defaults")
async def put_sector_defaults(
    tenant_id: int,
    sector_id: int,
    payload: SectorDefaultsUpdate,
    db: Session = Depends(get_db),
):
    try:
        invalidation = update_sector_defaults(
            db,
            tenant_id,
            sector_id,
            payload.default_day_value,
            payload.default_night_value,
            apply_to_existing=payload.apply_to_existing,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail="Sector not found") from e
    except ValueError as e:
        raise bad_request(e) from e

    return {
        "sector_id": sector_id,
        "default_day_value": payload.default_day_value,
        "default_night_value": payload.default_night_value,
        "invalidation": invalidation.model_dump(mode="json") if invalidation else None,
    }
