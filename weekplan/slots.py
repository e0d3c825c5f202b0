# weekplan/slots.py
import logging
import math
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .models import (
    UNAVAILABLE,
    CandidateSlot,
    ConflictReason,
    DayAvailability,
    ScheduledSlot,
    SlotSearchPrefs,
    WeeklyAvailability,
)

logger = logging.getLogger(__name__)

CANDIDATE_COLUMNS = ["date", "weekday", "start", "end"]


class AvailabilityNotFoundError(LookupError):
    """The primary user has no availability configured for the week."""

    def __init__(self, user_id: str, week_start: date):
        super().__init__(
            f"no availability configured for user {user_id} "
            f"in week starting {week_start.isoformat()}"
        )
        self.user_id = user_id
        self.week_start = week_start


def find_availability(availability: Iterable[WeeklyAvailability],
                      user_id: str,
                      week_start: date) -> Optional[WeeklyAvailability]:
    for record in availability:
        if record.user_id == user_id and record.week_start == week_start:
            return record
    return None


def overlap_window(own: DayAvailability,
                   other: Optional[DayAvailability]) -> Optional[Tuple[int, int]]:
    """
    Intersection of two day windows in minutes of day.

    other=None means there is no second participant. Returns None when either
    side is unavailable or the windows do not intersect.
    """
    if not own.available:
        return None
    if other is None:
        return own.start, own.end
    if not other.available:
        return None
    start, end = max(own.start, other.start), min(own.end, other.end)
    if end <= start:
        return None
    return start, end


def candidate_starts(window_start: int, window_end: int, duration: int,
                     step: int, limit: int) -> np.ndarray:
    """Start minutes of every duration-long window, stepping by `step`."""
    last = window_end - duration
    if last < window_start or limit <= 0:
        return np.array([], dtype=int)
    return np.arange(window_start, last + 1, step, dtype=int)[:limit]


def build_candidates(primary: WeeklyAvailability,
                     collaborator: Optional[WeeklyAvailability],
                     week_start: date,
                     duration: int,
                     prefs: SlotSearchPrefs,
                     with_collaborator: bool = False) -> pd.DataFrame:
    """Grid of candidate windows for the 7 days starting at week_start."""
    rows = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)

        other = None
        if with_collaborator:
            # a collaborator without a row is unavailable every day
            other = collaborator.for_date(day) if collaborator else UNAVAILABLE

        window = overlap_window(primary.for_date(day), other)
        if window is None:
            logger.debug("Skipping %s: no shared availability", day)
            continue
        if window[1] - window[0] < duration:
            logger.debug("Skipping %s: overlap shorter than %d min", day, duration)
            continue

        for start in candidate_starts(window[0], window[1], duration,
                                      prefs.step_minutes, prefs.max_slots_per_day):
            rows.append({
                "date": day,
                "weekday": day.weekday(),
                "start": int(start),
                "end": int(start) + duration,
            })

    return pd.DataFrame(rows, columns=CANDIDATE_COLUMNS)


def build_conflict_masks(candidates: pd.DataFrame,
                         schedules: Iterable[ScheduledSlot],
                         user_id: str,
                         collaborator_user_id: Optional[str] = None
                         ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Mark candidates that collide with existing bookings.

    Returns:
        (primary_busy, collaborator_busy) boolean arrays aligned to candidates
    """
    primary_busy = np.zeros(len(candidates), dtype=bool)
    collaborator_busy = np.zeros(len(candidates), dtype=bool)
    if candidates.empty:
        return primary_busy, collaborator_busy

    for slot in schedules:
        if slot.user_id == user_id:
            target = primary_busy
        elif collaborator_user_id is not None and slot.user_id == collaborator_user_id:
            target = collaborator_busy
        else:
            continue
        # half-open overlap: s1 < e2 and s2 < e1
        mask = (
            (candidates["date"] == slot.scheduled_date)
            & (candidates["start"] < slot.end)
            & (candidates["end"] > slot.start)
        )
        target |= mask.to_numpy(dtype=bool)

    return primary_busy, collaborator_busy


def conflict_reason(primary_busy: bool, collaborator_busy: bool) -> Optional[ConflictReason]:
    if primary_busy and collaborator_busy:
        return ConflictReason.BOTH_BUSY
    if primary_busy:
        return ConflictReason.PRIMARY_BUSY
    if collaborator_busy:
        return ConflictReason.COLLABORATOR_BUSY
    return None


def _duration_minutes(duration_hours) -> int:
    try:
        hours = float(duration_hours)
    except (TypeError, ValueError):
        return 0
    if math.isnan(hours) or hours <= 0:
        return 0
    return int(round(hours * 60))


def find_alternative_slots(
    user_id: str,
    week_start: date,
    duration_hours: float,
    availability: Iterable[WeeklyAvailability],
    schedules: Iterable[ScheduledSlot],
    collaborator_user_id: Optional[str] = None,
    exclude_schedule_id: Optional[str] = None,
    prefs: Optional[SlotSearchPrefs] = None,
) -> List[CandidateSlot]:
    """
    Rank the windows of the week where the user (and collaborator) are free.

    exclude_schedule_id: booking being moved; it never conflicts with itself.

    Returns:
        up to prefs.max_available free slots followed by up to
        prefs.max_unavailable blocked ones, each group ordered by date/start
    """
    prefs = prefs or SlotSearchPrefs()
    availability = list(availability)

    primary = find_availability(availability, user_id, week_start)
    if primary is None:
        raise AvailabilityNotFoundError(user_id, week_start)

    duration = _duration_minutes(duration_hours)
    if duration <= 0:
        logger.info("Ignoring slot search with non-positive duration %r", duration_hours)
        return []

    collaborator = None
    if collaborator_user_id:
        collaborator = find_availability(availability, collaborator_user_id, week_start)
        if collaborator is None:
            logger.info("Collaborator %s has no availability for week %s",
                        collaborator_user_id, week_start)

    candidates = build_candidates(
        primary=primary,
        collaborator=collaborator,
        week_start=week_start,
        duration=duration,
        prefs=prefs,
        with_collaborator=bool(collaborator_user_id),
    )
    if candidates.empty:
        logger.info("No shared availability for user %s in week %s", user_id, week_start)
        return []

    blocked = [s for s in schedules
               if exclude_schedule_id is None or s.id != exclude_schedule_id]
    primary_busy, collaborator_busy = build_conflict_masks(
        candidates, blocked, user_id, collaborator_user_id or None,
    )
    candidates["primary_busy"] = primary_busy
    candidates["collaborator_busy"] = collaborator_busy
    candidates["is_available"] = ~(primary_busy | collaborator_busy)

    ranked = candidates.sort_values(
        ["is_available", "date", "start"],
        ascending=[False, True, True],
        kind="mergesort",
    )
    result = pd.concat([
        ranked[ranked["is_available"]].head(prefs.max_available),
        ranked[~ranked["is_available"]].head(prefs.max_unavailable),
    ])

    slots = [
        CandidateSlot(
            date=row.date,
            start=int(row.start),
            end=int(row.end),
            is_available=bool(row.is_available),
            day_name=prefs.day_names[int(row.weekday)],
            conflict_reason=conflict_reason(bool(row.primary_busy),
                                            bool(row.collaborator_busy)),
        )
        for row in result.itertuples(index=False)
    ]
    logger.info("Found %d alternative slots (%d candidates) for user %s",
                len(slots), len(candidates), user_id)
    return slots
