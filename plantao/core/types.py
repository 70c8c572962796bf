# plantao/core/types.py

"""
Custom type definitions for the compensation engine.

NewType wrappers keep ids of different entities from being mixed up, and the
two enums name the only closed vocabularies the engine has: the period of a
shift and the tier a value was resolved from.
"""

import enum
from typing import Final, Literal, NewType

TenantId = NewType("TenantId", int)
SectorId = NewType("SectorId", int)
WorkerId = NewType("WorkerId", int)
ShiftId = NewType("ShiftId", int)
AssignmentId = NewType("AssignmentId", int)
Year = NewType("Year", int)
Month = NewType("Month", int)

Hours = float
MonetaryAmount = float

#: Marker for an entry no tier could put a value on.
UNPRICED: Final = "unpriced"

#: Either a resolved amount (zero included) or the unpriced marker.
EntryValue = MonetaryAmount | Literal["unpriced"]


class Period(str, enum.Enum):
    DAY = "day"
    NIGHT = "night"


class ValueSource(str, enum.Enum):
    """Tier a resolved value came from, in precedence order."""

    CACHED = "cached"
    OVERRIDE = "override"
    SECTOR_DEFAULT = "sector-default"
    BASE_VALUE = "base-value"
    NONE = "none"


class AssignmentStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
