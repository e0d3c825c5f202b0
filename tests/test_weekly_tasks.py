"""
Tests for splitting phase tasks into weekly cohorts.
"""

import math
from dataclasses import replace

import pytest

from weekplan.models import BusinessPhase
from weekplan.weekly_tasks import (
    build_phase_weekly_data,
    calculate_weeks_for_phase,
    distribute_tasks_in_weeks,
    find_current_week,
    select_current_phase,
)

from conftest import make_tasks


class TestWeekCount:

    def test_rounds_up(self):
        assert calculate_weeks_for_phase(17, 8) == 3

    def test_exact_multiple(self):
        assert calculate_weeks_for_phase(16, 8) == 2

    def test_never_below_one(self):
        assert calculate_weeks_for_phase(0, 8) == 1

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            calculate_weeks_for_phase(5, 0)


class TestDistribution:

    def test_seventeen_tasks(self):
        weeks = distribute_tasks_in_weeks(make_tasks(17), 8)
        assert sorted(weeks) == [1, 2, 3]
        assert [len(weeks[w]) for w in (1, 2, 3)] == [8, 8, 1]
        assert weeks[3][0].id == "t16"

    def test_week_number_assigned(self):
        weeks = distribute_tasks_in_weeks(make_tasks(10), 8)
        assert {t.week_number for t in weeks[1]} == {1}
        assert {t.week_number for t in weeks[2]} == {2}

    def test_order_preserved(self):
        tasks = list(reversed(make_tasks(4)))
        weeks = distribute_tasks_in_weeks(tasks, 2)
        assert [t.id for t in weeks[1]] == ["t3", "t2"]

    @pytest.mark.parametrize("count", [0, 1, 7, 8, 9, 23, 40])
    @pytest.mark.parametrize("capacity", [1, 3, 8])
    def test_buckets_cover_all_tasks(self, count, capacity):
        data = build_phase_weekly_data(make_tasks(count), tasks_per_week=capacity)
        assert sum(len(v) for v in data.tasks_by_week.values()) == count
        assert data.total_weeks == math.ceil(count / capacity)
        assert (data.total_weeks == 0) == (count == 0)


class TestPhaseWeeklyData:

    def test_empty_phase(self):
        data = build_phase_weekly_data([])
        assert data.total_tasks == 0
        assert data.total_weeks == 0
        assert data.current_week == 1
        assert data.completed_tasks == 0
        assert data.tasks_by_week == {}
        assert data.progress_percent == 0

    def test_current_week_skips_finished_week(self):
        # week 1 fully done, week 2 has 2 of 4 pending
        done = [f"t{i}" for i in range(10)]
        data = build_phase_weekly_data(make_tasks(12), done)
        assert data.total_weeks == 2
        assert data.current_week == 2
        assert data.completed_tasks == 10
        assert data.progress_percent == 83

    def test_first_week_when_nothing_done(self):
        data = build_phase_weekly_data(make_tasks(20))
        assert data.current_week == 1
        assert data.progress_percent == 0

    def test_finished_phase_stays_on_last_week(self):
        tasks = make_tasks(17)
        data = build_phase_weekly_data(tasks, [t.id for t in tasks])
        assert data.current_week == 3
        assert data.progress_percent == 100

    def test_half_rounds_up(self):
        data = build_phase_weekly_data(make_tasks(8), ["t0"])
        assert data.progress_percent == 13

    def test_uses_task_flags_without_completion_set(self):
        tasks = make_tasks(3)
        tasks[0] = replace(tasks[0], is_completed=True)
        data = build_phase_weekly_data(tasks)
        assert data.completed_tasks == 1

    def test_unknown_completion_ids_ignored(self):
        data = build_phase_weekly_data(make_tasks(4), ["nope"])
        assert data.completed_tasks == 0

    def test_to_dict(self):
        data = build_phase_weekly_data(make_tasks(9), ["t0"])
        out = data.to_dict()
        assert out["total_weeks"] == 2
        assert out["tasks_by_week"][2][0]["id"] == "t8"
        assert out["tasks_by_week"][1][0]["is_completed"] is True


class TestFindCurrentWeek:

    def test_missing_week_treated_as_done(self):
        assert find_current_week({}, 3) == 3


class TestSelectCurrentPhase:

    def test_prefers_active(self):
        phases = [
            BusinessPhase("p1", 1, "Build", "completed"),
            BusinessPhase("p3", 3, "Learn", "active"),
            BusinessPhase("p2", 2, "Measure", "active"),
        ]
        assert select_current_phase(phases).id == "p2"

    def test_falls_back_to_first(self):
        phases = [BusinessPhase("p2", 2), BusinessPhase("p1", 1)]
        assert select_current_phase(phases).id == "p1"

    def test_no_phases(self):
        assert select_current_phase([]) is None
