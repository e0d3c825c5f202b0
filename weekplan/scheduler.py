# weekplan/scheduler.py
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional

from .metrics import PHASE_OVERVIEW_TIME, SLOT_SEARCH_TIME, SLOTS_SUGGESTED
from .models import (
    CandidateSlot,
    PhaseTask,
    PhaseWeeklyData,
    ScheduledSlot,
    SlotSearchPrefs,
    WeeklyAvailability,
    parse_date,
)
from .slots import find_alternative_slots
from .weekly_tasks import DEFAULT_TASKS_PER_WEEK, build_phase_weekly_data

Row = Mapping[str, Any]


def suggest_alternative_slots(availability_rows: Iterable[Row],
                              schedule_rows: Iterable[Row],
                              user_id: str,
                              week_start: date,
                              duration_hours: float,
                              collaborator_user_id: Optional[str] = None,
                              exclude_schedule_id: Optional[str] = None,
                              prefs: Optional[SlotSearchPrefs] = None) -> List[CandidateSlot]:
    """
    Alternative slots from raw store rows.

    availability_rows: user_weekly_availability rows for the users involved.
    schedule_rows: task_schedule rows of the users involved for that week.
    """
    availability = [WeeklyAvailability.from_record(r) for r in availability_rows]
    schedules = [ScheduledSlot.from_record(r) for r in schedule_rows]

    with SLOT_SEARCH_TIME.time():
        slots = find_alternative_slots(
            user_id=str(user_id),
            week_start=parse_date(week_start),
            duration_hours=duration_hours,
            availability=availability,
            schedules=schedules,
            collaborator_user_id=str(collaborator_user_id) if collaborator_user_id else None,
            exclude_schedule_id=str(exclude_schedule_id) if exclude_schedule_id else None,
            prefs=prefs,
        )

    available = sum(1 for s in slots if s.is_available)
    SLOTS_SUGGESTED.labels(availability="available").inc(available)
    SLOTS_SUGGESTED.labels(availability="unavailable").inc(len(slots) - available)
    return slots


def validated_task_ids(completion_rows: Iterable[Row]) -> set:
    """Task ids whose completion was approved by a leader."""
    return {str(r["task_id"]) for r in completion_rows if r.get("validated_by_leader")}


def phase_overview(task_rows: Iterable[Row],
                   completion_rows: Iterable[Row] = (),
                   tasks_per_week: int = DEFAULT_TASKS_PER_WEEK) -> PhaseWeeklyData:
    """
    Weekly breakdown of one user's tasks for a phase.

    task_rows: tasks rows for a single user, organization and phase.
    completion_rows: task_completions rows; only leader-validated ones count.
    """
    done = validated_task_ids(completion_rows)
    rows = sorted(task_rows, key=lambda r: r.get("order_index") or 0)
    tasks = [PhaseTask.from_record(r) for r in rows]

    with PHASE_OVERVIEW_TIME.time():
        return build_phase_weekly_data(tasks, done, tasks_per_week)
