# weekplan/formula.py
"""
Weekly task quota per user.

    TASKS = BASE x ROLE x TEAM x PHASE x HOURS, rounded and clamped to [3, 20]

Used to preview how much work a user will get before the tasks are generated.
"""
import logging
import math
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple, Tuple

from .models import TaskQuota

logger = logging.getLogger(__name__)

BASE_TASKS_PER_WEEK = 4
MIN_TASKS_PER_WEEK = 3
MAX_TASKS_PER_WEEK = 20


class Methodology(str, Enum):
    LEAN_STARTUP = "lean_startup"
    SCALING_UP = "scaling_up"


class RoleFactor(NamedTuple):
    multiplier: float
    description: str


class PhaseFactor(NamedTuple):
    factor: float
    name: str


ROLE_FACTORS = MappingProxyType({
    "ceo": RoleFactor(1.2, "CEO/Director - strategic responsibility"),
    "cto": RoleFactor(1.3, "CTO/Tech lead - technical complexity"),
    "coo": RoleFactor(1.2, "COO - process management"),
    "cmo": RoleFactor(1.1, "CMO - campaigns and brand"),
    "cfo": RoleFactor(1.1, "CFO - budgets and investment"),
    "marketing": RoleFactor(1.0, "Marketing - content and advertising"),
    "ventas": RoleFactor(1.0, "Sales - pipeline and customers"),
    "operaciones": RoleFactor(1.1, "Operations - logistics and quality"),
    "producto": RoleFactor(1.2, "Product - development and UX"),
    "finanzas": RoleFactor(0.9, "Finance - analysis and reporting"),
    "rrhh": RoleFactor(0.8, "People - hiring and culture"),
    "legal": RoleFactor(0.7, "Legal - contracts and compliance"),
    "general": RoleFactor(1.0, "General - standard tasks"),
})

# (upper bound inclusive, factor); sizes above the last bound use TEAM_FACTOR_LARGE
TEAM_FACTORS: Tuple[Tuple[int, float], ...] = (
    (1, 1.3),     # solo
    (5, 1.0),
    (10, 0.9),
    (20, 0.85),
)
TEAM_FACTOR_LARGE = 0.8

PHASE_FACTORS = MappingProxyType({
    Methodology.LEAN_STARTUP: MappingProxyType({
        1: PhaseFactor(1.0, "Build"),
        2: PhaseFactor(0.9, "Measure"),
        3: PhaseFactor(1.0, "Learn"),
        4: PhaseFactor(1.2, "Scale"),
    }),
    Methodology.SCALING_UP: MappingProxyType({
        1: PhaseFactor(1.1, "People"),
        2: PhaseFactor(1.0, "Strategy"),
        3: PhaseFactor(1.2, "Execution"),
        4: PhaseFactor(1.0, "Cash"),
    }),
})

# (lower bound inclusive, factor), checked top down
HOURS_FACTORS: Tuple[Tuple[float, float], ...] = (
    (40, 1.2),
    (30, 1.0),
    (20, 0.8),
    (10, 0.6),
)
HOURS_FACTOR_MINIMAL = 0.4

# substrings of a free-text job title, checked in order
ROLE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ceo", ("ceo", "director", "fundador", "founder", "owner")),
    ("cto", ("cto", "tech", "desarrollo", "developer")),
    ("operaciones", ("coo", "operation", "logistica")),
    ("marketing", ("cmo", "marketing", "growth", "redes")),
    ("finanzas", ("cfo", "finanz", "contab")),
    ("ventas", ("venta", "sales", "comercial")),
    ("producto", ("product", "ux", "diseño")),
    ("rrhh", ("rrhh", "hr", "people")),
    ("legal", ("legal", "compliance")),
)


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _fmt(factor: float) -> str:
    return f"{factor:g}"


def role_factor(role: Any) -> float:
    key = role.strip().lower() if isinstance(role, str) else ""
    return ROLE_FACTORS.get(key, ROLE_FACTORS["general"]).multiplier


def team_size_factor(team_size: Any) -> float:
    """Unparseable sizes fall through to the largest-team factor."""
    size = _as_number(team_size)
    if math.isnan(size):
        return TEAM_FACTOR_LARGE
    for upper, factor in TEAM_FACTORS:
        if size <= upper:
            # exactly one person gets the solo bonus, zero or less is a small team
            if upper == 1 and size != 1:
                continue
            return factor
    return TEAM_FACTOR_LARGE


def phase_factor(methodology: Any, phase_number: Any) -> float:
    try:
        table = PHASE_FACTORS[Methodology(methodology)]
    except ValueError:
        return 1.0
    number = _as_number(phase_number)
    if not number.is_integer():
        return 1.0
    entry = table.get(int(number))
    return entry.factor if entry else 1.0


def phase_name(methodology: Any, phase_number: int) -> str:
    try:
        entry = PHASE_FACTORS[Methodology(methodology)].get(phase_number)
    except ValueError:
        entry = None
    return entry.name if entry else f"Phase {phase_number}"


def hours_factor(hours_per_week: Any) -> float:
    """NaN and anything below ten hours get the minimal factor."""
    hours = _as_number(hours_per_week)
    if math.isnan(hours):
        return HOURS_FACTOR_MINIMAL
    for lower, factor in HOURS_FACTORS:
        if hours >= lower:
            return factor
    return HOURS_FACTOR_MINIMAL


def detect_role(title: Any) -> str:
    """Map a free-text job title ("Head of Sales", "Founder") to a role key."""
    if not isinstance(title, str) or not title.strip():
        return "general"
    text = title.lower()
    for role, keywords in ROLE_KEYWORDS:
        if any(k in text for k in keywords):
            return role
    return "general"


def preview_task_calculation(role: str,
                             team_size: int,
                             methodology: str,
                             phase_number: int,
                             hours_per_week: float) -> TaskQuota:
    factors = (
        role_factor(role),
        team_size_factor(team_size),
        phase_factor(methodology, phase_number),
        hours_factor(hours_per_week),
    )
    raw = BASE_TASKS_PER_WEEK * math.prod(factors)
    tasks = max(MIN_TASKS_PER_WEEK, min(MAX_TASKS_PER_WEEK, int(math.floor(raw + 0.5))))

    formula = " × ".join([str(BASE_TASKS_PER_WEEK)] + [_fmt(f) for f in factors])
    logger.debug("Quota for role=%s team=%s phase=%s/%s hours=%s: %s = %d",
                 role, team_size, methodology, phase_number, hours_per_week,
                 formula, tasks)
    return TaskQuota(
        tasks_per_week=tasks,
        formula=formula,
        base=BASE_TASKS_PER_WEEK,
        role_factor=factors[0],
        team_factor=factors[1],
        phase_factor=factors[2],
        hours_factor=factors[3],
    )
