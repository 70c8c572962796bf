import math
from collections.abc import Iterable

from plantao.core.models import AuditInfo, ResolvedEntry, SumDetail


def build_audit_info(entries: Iterable[ResolvedEntry]) -> AuditInfo:
    """List exactly which entries were summed, so a total can be checked by hand.

    Entries whose stored value was rejected (e.g. negative) are unpriced and
    also counted under ``invalid_value``.
    """
    entries = list(entries)
    included = [entry for entry in entries if entry.is_priced]
    invalid = [entry for entry in entries if entry.invalid_reason is not None]

    return AuditInfo(
        total_loaded=len(entries),
        with_value=len(included),
        without_value=len(entries) - len(included),
        invalid_value=len(invalid),
        invalid_ids=[entry.id for entry in invalid],
        included_ids=[entry.id for entry in included],
        sum_details=[SumDetail(id=e.id, worker_name=e.worker_name, value=e.value) for e in included],
        final_sum=math.fsum(entry.value for entry in included),
    )
