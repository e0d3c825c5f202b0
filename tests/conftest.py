"""Shared fixtures for weekplan tests."""

from datetime import date

import pytest

from weekplan.models import (
    DayAvailability,
    PhaseTask,
    ScheduledSlot,
    WeeklyAvailability,
    parse_time,
)

WEEKDAY_INDEX = {
    "mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6,
}


def make_availability(user_id, week_start, days, start, end):
    """Availability with the same window on each of ``days`` ("mon", "tue", ...)."""
    window = DayAvailability(True, parse_time(start), parse_time(end))
    open_days = {WEEKDAY_INDEX[d] for d in days}
    return WeeklyAvailability(
        user_id=user_id,
        week_start=week_start,
        days=tuple(window if i in open_days else DayAvailability() for i in range(7)),
    )


def make_slot(slot_id, user_id, day, start, end):
    return ScheduledSlot(slot_id, user_id, day, parse_time(start), parse_time(end))


def make_tasks(count, phase=1):
    return [
        PhaseTask(id=f"t{i}", title=f"Task {i}", phase=phase, order_index=i)
        for i in range(count)
    ]


@pytest.fixture
def monday():
    """2025-01-06 is a Monday."""
    return date(2025, 1, 6)


@pytest.fixture
def weekdays_9_to_5(monday):
    return make_availability("ana", monday, ["mon", "tue", "wed", "thu", "fri"],
                             "09:00", "17:00")


@pytest.fixture
def collaborator_mon_to_wed(monday):
    return make_availability("luis", monday, ["mon", "tue", "wed"], "10:00", "14:00")
