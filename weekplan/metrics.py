# weekplan/metrics.py
from prometheus_client import Counter, Summary


SLOT_SEARCH_TIME = Summary(
    "weekplan_slot_search_seconds",
    "Time spent searching alternative slots for a week",
)

SLOTS_SUGGESTED = Counter(
    "weekplan_slots_suggested_total",
    "Alternative slots returned to callers",
    ["availability"],  # available | unavailable
)

PHASE_OVERVIEW_TIME = Summary(
    "weekplan_phase_overview_seconds",
    "Time spent splitting phase tasks into weeks",
)
