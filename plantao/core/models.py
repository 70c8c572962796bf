import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plantao.core.types import UNPRICED, AssignmentStatus, EntryValue, Period, ValueSource


class Sector(BaseModel):
    """Sector with its default day/night values (second fallback tier)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    default_day_value: float | None = None
    default_night_value: float | None = None


class ShiftOccurrence(BaseModel):
    """One dated, timed work slot."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    sector_id: int | None = None
    base_value: float | None = None
    title: str | None = None


class Assignment(BaseModel):
    """Link between a worker and a shift occurrence."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    shift_id: int
    worker_id: int
    worker_name: str | None = None
    cached_value: float | None = None
    status: AssignmentStatus = AssignmentStatus.ASSIGNED


class RateOverride(BaseModel):
    """Worker- and month-specific value for one sector."""
    model_config = ConfigDict(from_attributes=True)

    tenant_id: int | None = None
    sector_id: int
    worker_id: int
    month: int = Field(ge=1, le=12)
    year: int
    day_value: float | None = None
    night_value: float | None = None


class OverrideScope(BaseModel):
    tenant_id: int
    sector_id: int
    worker_id: int
    month: int = Field(ge=1, le=12)
    year: int


class ResolvedEntry(BaseModel):
    """A single (worker, shift) pairing with its resolved value."""
    id: int
    shift_id: int
    worker_id: int
    worker_name: str
    sector_id: int | None = None
    sector_name: str
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    duration_hours: float
    period: Period
    value: EntryValue
    source: ValueSource
    invalid_reason: str | None = None

    @model_validator(mode="after")
    def check_value_matches_source(self):
        # Unpriced and source "none" always come together
        if (self.value == UNPRICED) != (self.source is ValueSource.NONE):
            raise ValueError(f"value {self.value!r} does not match source {self.source.value!r}")
        return self

    @property
    def is_priced(self) -> bool:
        return self.value != UNPRICED


class WorkerSummary(BaseModel):
    worker_id: int
    worker_name: str
    entry_count: int = 0
    priced_count: int = 0
    unpriced: int = 0
    value: float = 0.0
    hours: float = 0.0
    entries: list[ResolvedEntry] = []


class SectorReport(BaseModel):
    sector_id: int | None = None
    sector_name: str
    entry_count: int = 0
    priced_count: int = 0
    unpriced: int = 0
    value: float = 0.0
    hours: float = 0.0
    worker_count: int = 0
    workers: list[WorkerSummary] = []


class WorkerSectorSubtotal(BaseModel):
    sector_id: int | None = None
    sector_name: str
    entry_count: int = 0
    unpriced: int = 0
    value: float = 0.0


class WorkerTotal(BaseModel):
    """Total payable for one worker across every sector."""
    worker_id: int
    worker_name: str
    entry_count: int = 0
    priced_count: int = 0
    unpriced: int = 0
    value: float = 0.0
    hours: float = 0.0
    sectors: list[WorkerSectorSubtotal] = []


class Totals(BaseModel):
    entry_count: int = 0
    priced_count: int = 0
    unpriced: int = 0
    value: float = 0.0
    hours: float = 0.0
    worker_count: int = 0
    sector_count: int = 0


class SumDetail(BaseModel):
    id: int
    worker_name: str
    value: float


class AuditInfo(BaseModel):
    """Trace of which entries made it into the monetary sum."""
    total_loaded: int = 0
    with_value: int = 0
    without_value: int = 0
    invalid_value: int = 0
    invalid_ids: list[int] = []
    included_ids: list[int] = []
    sum_details: list[SumDetail] = []
    final_sum: float = 0.0


class FinancialReport(BaseModel):
    sectors: list[SectorReport] = []
    workers: list[WorkerTotal] = []
    totals: Totals = Field(default_factory=Totals)
    audit: AuditInfo = Field(default_factory=AuditInfo)


class InvalidationResult(BaseModel):
    scope: OverrideScope | None = None
    sector_id: int | None = None
    cleared_ids: list[int] = []
    completed: bool = True
    warning: str | None = None


class OverrideSaveResult(BaseModel):
    override: RateOverride | None = None
    deleted: bool = False
    invalidation: InvalidationResult
