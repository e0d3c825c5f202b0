# weekplan/models.py
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday",
            "friday", "saturday", "sunday")
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday",
             "Friday", "Saturday", "Sunday")
MINUTES_PER_DAY = 24 * 60


def parse_time(value: Any) -> int:
    """Minutes since midnight for "HH:MM", "HH:MM:SS" or a datetime.time."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise ValueError(f"invalid time of day: {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"invalid time of day: {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"invalid time of day: {value!r}") from None
    # 24:00 is accepted as end of day
    if not (0 <= minutes < 60) or not (0 <= hours * 60 + minutes <= MINUTES_PER_DAY):
        raise ValueError(f"invalid time of day: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    h, m = divmod(int(minutes), 60)
    return f"{h:02d}:{m:02d}"


def times_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open intervals [start1, end1) and [start2, end2) intersect."""
    return start1 < end2 and start2 < end1


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class DayAvailability:
    available: bool = False
    start: int = 0   # minutes of day
    end: int = 0     # minutes of day, exclusive

    def __post_init__(self):
        if self.available and not self.start < self.end:
            raise ValueError(
                f"availability window must start before it ends "
                f"({minutes_to_time(self.start)}-{minutes_to_time(self.end)})"
            )


UNAVAILABLE = DayAvailability()


@dataclass(frozen=True)
class WeeklyAvailability:
    """Declared availability of one user for the week starting ``week_start``.

    ``days`` holds exactly seven entries indexed by weekday, Monday first.
    """
    user_id: str
    week_start: date
    days: Tuple[DayAvailability, ...] = (UNAVAILABLE,) * 7

    def __post_init__(self):
        if len(self.days) != 7:
            raise ValueError(f"expected 7 day records, got {len(self.days)}")

    def for_weekday(self, weekday: int) -> DayAvailability:
        return self.days[weekday]

    def for_date(self, day: date) -> DayAvailability:
        return self.days[day.weekday()]

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "WeeklyAvailability":
        """Build from a flat store row (monday_available, monday_start, ...)."""
        days = []
        for key in WEEKDAYS:
            if row.get(f"{key}_available"):
                days.append(DayAvailability(
                    available=True,
                    start=parse_time(row[f"{key}_start"]),
                    end=parse_time(row[f"{key}_end"]),
                ))
            else:
                days.append(UNAVAILABLE)
        return cls(
            user_id=str(row["user_id"]),
            week_start=parse_date(row["week_start"]),
            days=tuple(days),
        )


@dataclass(frozen=True)
class ScheduledSlot:
    id: str
    user_id: str
    scheduled_date: date
    start: int   # minutes of day
    end: int

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "ScheduledSlot":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            scheduled_date=parse_date(row["scheduled_date"]),
            start=parse_time(row["scheduled_start"]),
            end=parse_time(row["scheduled_end"]),
        )


class ConflictReason(str, Enum):
    PRIMARY_BUSY = "You have another task"
    COLLABORATOR_BUSY = "Collaborator busy"
    BOTH_BUSY = "Both busy"


@dataclass(frozen=True)
class CandidateSlot:
    date: date
    start: int
    end: int
    is_available: bool
    day_name: str
    conflict_reason: Optional[ConflictReason] = None

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "date": self.date.isoformat(),
            "start": minutes_to_time(self.start),
            "end": minutes_to_time(self.end),
            "is_available": self.is_available,
            "day_name": self.day_name,
        }
        if self.conflict_reason is not None:
            out["conflict_reason"] = self.conflict_reason.value
        return out


@dataclass(frozen=True)
class PhaseTask:
    id: str
    title: str
    phase: int
    order_index: int = 0
    description: Optional[str] = None
    area: Optional[str] = None
    is_completed: bool = False
    week_number: int = 1            # assigned by the weekly allocator
    phase_id: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    user_id: Optional[str] = None
    leader_id: Optional[str] = None

    @classmethod
    def from_record(cls, row: Mapping[str, Any],
                    completed_ids: Iterable[str] = ()) -> "PhaseTask":
        task_id = str(row["id"])
        return cls(
            id=task_id,
            title=row.get("title") or "",
            phase=int(row["phase"]),
            order_index=int(row.get("order_index") or 0),
            description=row.get("description"),
            area=row.get("area"),
            is_completed=task_id in set(completed_ids),
            phase_id=row.get("phase_id"),
            estimated_hours=row.get("estimated_hours"),
            actual_hours=row.get("actual_hours"),
            user_id=row.get("user_id"),
            leader_id=row.get("leader_id"),
        )


@dataclass
class PhaseWeeklyData:
    total_tasks: int = 0
    total_weeks: int = 0
    current_week: int = 1
    completed_tasks: int = 0
    tasks_by_week: Dict[int, List[PhaseTask]] = field(default_factory=dict)
    progress_percent: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tasks": self.total_tasks,
            "total_weeks": self.total_weeks,
            "current_week": self.current_week,
            "completed_tasks": self.completed_tasks,
            "tasks_by_week": {
                week: [asdict(t) for t in tasks]
                for week, tasks in self.tasks_by_week.items()
            },
            "progress_percent": self.progress_percent,
        }


@dataclass(frozen=True)
class BusinessPhase:
    id: str
    phase_number: int
    phase_name: str = ""
    status: str = "pending"    # pending | active | completed
    progress_percentage: float = 0.0

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "BusinessPhase":
        return cls(
            id=str(row["id"]),
            phase_number=int(row["phase_number"]),
            phase_name=row.get("phase_name") or "",
            status=row.get("status") or "pending",
            progress_percentage=float(row.get("progress_percentage") or 0),
        )


@dataclass(frozen=True)
class TaskQuota:
    tasks_per_week: int
    formula: str
    base: int
    role_factor: float
    team_factor: float
    phase_factor: float
    hours_factor: float

    def total_for_weeks(self, weeks: int) -> int:
        """Tasks for a phase lasting ``weeks`` weeks."""
        return self.tasks_per_week * max(0, int(weeks))


@dataclass
class SlotSearchPrefs:
    step_minutes: int = 30
    max_slots_per_day: int = 10     # cap candidates per day
    max_available: int = 5
    max_unavailable: int = 2        # blocked slots kept for context
    day_names: Tuple[str, ...] = DAY_NAMES
