"""Roll-ups of resolved entries: per sector, per worker and grand totals.

Unpriced entries are counted separately and never enter a monetary sum, so
a worker or sector without priced entries ends at zero, not an error.
"""

import math
import unicodedata
from collections.abc import Callable, Hashable, Iterable

from plantao.core.config import NO_SECTOR_NAME
from plantao.core.models import (
    FinancialReport,
    ResolvedEntry,
    SectorReport,
    Totals,
    WorkerSectorSubtotal,
    WorkerSummary,
    WorkerTotal,
)

from .audit import build_audit_info


def _name_key(name: str) -> str:
    """Accent- and case-insensitive sort key ("Ética" sorts next to "Etapa")."""
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _group_by(entries: Iterable[ResolvedEntry], key: Callable[[ResolvedEntry], Hashable]) -> dict:
    """Group entries, keeping first-appearance order of groups and input order inside them."""
    groups: dict = {}
    for entry in entries:
        groups.setdefault(key(entry), []).append(entry)
    return groups


def _tally(entries: list[ResolvedEntry]) -> dict:
    priced = [entry.value for entry in entries if entry.is_priced]
    return {
        "entry_count": len(entries),
        "priced_count": len(priced),
        "unpriced": len(entries) - len(priced),
        "value": math.fsum(priced),
        "hours": math.fsum(entry.duration_hours for entry in entries),
    }


def _sector_name(entries: list[ResolvedEntry]) -> str:
    first = entries[0]
    return first.sector_name if first.sector_id is not None else NO_SECTOR_NAME


def aggregate(entries: Iterable[ResolvedEntry]) -> list[SectorReport]:
    """
    Sector -> worker -> entries.

    Sectors sort by name, workers by name inside their sector, entries by
    date inside their worker. Ties keep input order. Entries without sector
    land in one synthetic "no sector" group.
    """
    reports = []
    for sector_id, sector_entries in _group_by(entries, lambda e: e.sector_id).items():
        workers = []
        for worker_id, worker_entries in _group_by(sector_entries, lambda e: e.worker_id).items():
            workers.append(
                WorkerSummary(
                    worker_id=worker_id,
                    worker_name=worker_entries[0].worker_name,
                    entries=sorted(worker_entries, key=lambda e: e.date),
                    **_tally(worker_entries),
                )
            )
        workers.sort(key=lambda w: _name_key(w.worker_name))

        reports.append(
            SectorReport(
                sector_id=sector_id,
                sector_name=_sector_name(sector_entries),
                worker_count=len(workers),
                workers=workers,
                **_tally(sector_entries),
            )
        )

    reports.sort(key=lambda r: _name_key(r.sector_name))
    return reports


def grand_totals(entries: Iterable[ResolvedEntry]) -> Totals:
    """Totals over all entries; ``value`` equals the sum of every priced entry."""
    entries = list(entries)
    return Totals(
        worker_count=len({entry.worker_id for entry in entries}),
        sector_count=len({entry.sector_id for entry in entries}),
        **_tally(entries),
    )


def aggregate_by_worker(entries: Iterable[ResolvedEntry]) -> list[WorkerTotal]:
    """Total payable per worker across every sector, sorted by worker name."""
    totals = []
    for worker_id, worker_entries in _group_by(entries, lambda e: e.worker_id).items():
        sectors = [
            WorkerSectorSubtotal(
                sector_id=sector_id,
                sector_name=_sector_name(sector_entries),
                entry_count=len(sector_entries),
                unpriced=sum(1 for e in sector_entries if not e.is_priced),
                value=math.fsum(e.value for e in sector_entries if e.is_priced),
            )
            for sector_id, sector_entries in _group_by(worker_entries, lambda e: e.sector_id).items()
        ]
        sectors.sort(key=lambda s: _name_key(s.sector_name))

        totals.append(
            WorkerTotal(
                worker_id=worker_id,
                worker_name=worker_entries[0].worker_name,
                sectors=sectors,
                **_tally(worker_entries),
            )
        )

    totals.sort(key=lambda t: _name_key(t.worker_name))
    return totals


def build_financial_report(entries: Iterable[ResolvedEntry]) -> FinancialReport:
    """Everything the financial screens render, from one list of entries."""
    entries = list(entries)
    return FinancialReport(
        sectors=aggregate(entries),
        workers=aggregate_by_worker(entries),
        totals=grand_totals(entries),
        audit=build_audit_info(entries),
    )
