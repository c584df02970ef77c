"""Shared typed models for the fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class CatalogRow:
    """One SATCAT entry. Only norad_id matters to the scheduler."""

    intl_des: str
    norad_id: str
    object_type: str = ""
    sat_name: str = ""
    country: str = ""
    launch_date: str = ""
    launch_site: str = ""
    decay_date: str = ""
    period: str = ""
    inclination: str = ""
    apogee: str = ""
    perigee: str = ""
    comment: str = ""
    comment_code: str = ""
    rcs_value: str = ""
    rcs_size: str = ""
    file_id: str = ""
    launch_year: str = ""
    launch_num: str = ""
    launch_piece: str = ""
    is_current: str = ""
    object_name: str = ""
    object_id: str = ""
    object_num: str = ""


@dataclass(frozen=True, slots=True)
class FetchWindow:
    """Half-open slice [start, stop) over the ordered catalog rows."""

    start: int
    stop: int

    def __len__(self) -> int:
        return max(0, self.stop - self.start)


class ClaimStatus(Enum):
    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"


class CycleStatus(Enum):
    FETCHED = "fetched"
    EMPTY = "empty"  # nothing claimed, no request sent


class SchedulerState(Enum):
    IDLE = "idle"
    CYCLING = "cycling"
    STOPPED = "stopped"


@dataclass(slots=True)
class DemuxResult:
    """Outcome of splitting one bulk response."""

    lines_written: int = 0
    lines_dropped: int = 0
    per_id: dict[int, int] = field(default_factory=dict)


@dataclass(slots=True)
class CycleResult:
    """Outcome of one scheduler cycle."""

    status: CycleStatus
    window: FetchWindow
    claimed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    query: str | None = None
    demux: DemuxResult | None = None
