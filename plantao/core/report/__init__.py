"""
Report module - resolved entries and their roll-ups.

Exports every public function so callers import from ``plantao.core.report``.
"""

from .aggregate import aggregate, aggregate_by_worker, build_financial_report, grand_totals
from .audit import build_audit_info
from .entries import build_entries, load_entries

__all__ = [
    # entries
    "build_entries",
    "load_entries",
    # aggregate
    "aggregate",
    "aggregate_by_worker",
    "grand_totals",
    "build_financial_report",
    # audit
    "build_audit_info",
]
