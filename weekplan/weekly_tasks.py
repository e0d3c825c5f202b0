# weekplan/weekly_tasks.py
import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

import numpy as np

from .models import BusinessPhase, PhaseTask, PhaseWeeklyData

logger = logging.getLogger(__name__)

DEFAULT_TASKS_PER_WEEK = 8


def _check_capacity(tasks_per_week: int) -> None:
    if tasks_per_week < 1:
        raise ValueError(f"tasks_per_week must be at least 1, got {tasks_per_week}")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_weeks_for_phase(total_tasks: int,
                              tasks_per_week: int = DEFAULT_TASKS_PER_WEEK) -> int:
    """Weeks needed to get through a phase, never less than one."""
    _check_capacity(tasks_per_week)
    return max(1, math.ceil(total_tasks / tasks_per_week))


def week_numbers(total_tasks: int,
                 tasks_per_week: int = DEFAULT_TASKS_PER_WEEK) -> np.ndarray:
    """1-based week of each task position."""
    _check_capacity(tasks_per_week)
    return np.arange(total_tasks) // tasks_per_week + 1


def distribute_tasks_in_weeks(tasks: List[PhaseTask],
                              tasks_per_week: int = DEFAULT_TASKS_PER_WEEK
                              ) -> Dict[int, List[PhaseTask]]:
    """
    Sequential partition of tasks into weeks by list position.

    Position 0..tasks_per_week-1 lands in week 1, the next batch in week 2
    and so on. Task metadata other than order is not considered.
    """
    weeks: Dict[int, List[PhaseTask]] = {}
    for task, week in zip(tasks, week_numbers(len(tasks), tasks_per_week)):
        week = int(week)
        weeks.setdefault(week, []).append(replace(task, week_number=week))
    return weeks


def find_current_week(tasks_by_week: Dict[int, List[PhaseTask]], total_weeks: int) -> int:
    """First week with pending work; the last week once everything is done."""
    for week in range(1, total_weeks + 1):
        if any(not t.is_completed for t in tasks_by_week.get(week, [])):
            return week
    return max(1, total_weeks)


def build_phase_weekly_data(tasks: Iterable[PhaseTask],
                            completed_ids: Optional[Iterable[str]] = None,
                            tasks_per_week: int = DEFAULT_TASKS_PER_WEEK
                            ) -> PhaseWeeklyData:
    """
    Split a phase's ordered tasks into weekly cohorts and measure progress.

    tasks: already ordered by order_index.
    completed_ids: ids with a validated completion. When None, each task's
                   own is_completed flag is used.
    """
    _check_capacity(tasks_per_week)
    tasks = list(tasks)
    if not tasks:
        return PhaseWeeklyData()

    if completed_ids is not None:
        done = set(completed_ids)
        tasks = [replace(t, is_completed=t.id in done) for t in tasks]

    tasks_by_week = distribute_tasks_in_weeks(tasks, tasks_per_week)
    total_weeks = calculate_weeks_for_phase(len(tasks), tasks_per_week)
    completed = sum(1 for t in tasks if t.is_completed)

    data = PhaseWeeklyData(
        total_tasks=len(tasks),
        total_weeks=total_weeks,
        current_week=find_current_week(tasks_by_week, total_weeks),
        completed_tasks=completed,
        tasks_by_week=tasks_by_week,
        progress_percent=round_half_up(completed / len(tasks) * 100),
    )
    logger.debug("Phase split into %d weeks, current week %d, %d%% done",
                 data.total_weeks, data.current_week, data.progress_percent)
    return data


def select_current_phase(phases: Iterable[BusinessPhase]) -> Optional[BusinessPhase]:
    """Lowest-numbered active phase, falling back to the first phase."""
    ordered = sorted(phases, key=lambda p: p.phase_number)
    for phase in ordered:
        if phase.status == "active":
            return phase
    return ordered[0] if ordered else None
