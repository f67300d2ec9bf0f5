"""
Insights - data model.

Responsibility:
- InsightContext: the normalized, domain-agnostic snapshot every rule reads.
- Insight: the ranked narrative record a rule emits (or not).

Design notes:
- Both are frozen; rules never mutate a context and the engine never mutates
  an insight after creation.
- Threshold defaults live here and are applied by rules at read time, so an
  adapter only passes what the organization actually overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Sequence, Tuple

Severity = Literal["info", "warning", "critical", "positive"]
ActionType = Literal["navigate", "filter", "open"]

DEFAULT_PRIORITY = 99


class Polarity(str, Enum):
    INCREASE_IS_GOOD = "increase_is_good"
    INCREASE_IS_BAD = "increase_is_bad"


# ----------------------------
# Context records
# ----------------------------

@dataclass(frozen=True)
class MonthlyPoint:
    period: str  # "YYYY-MM"
    value: float
    balance: Optional[float] = None


@dataclass(frozen=True)
class CategoryPoint:
    name: str
    value: float


@dataclass(frozen=True)
class ClientSummary:
    id: str
    total_committed: float
    total_paid: float
    balance_due: float
    currency_code: Optional[str] = None
    name: Optional[str] = None


THRESHOLD_DEFAULTS: Dict[str, float] = {
    "growth_significant": 15.0,
    "trend_stable": 4.0,
    "concentration_pareto": 80.0,
    "min_data_points": 3,
    "upsell_liquidity": 90.0,
    "cash_flow_risk": 80.0,
}


@dataclass(frozen=True)
class Thresholds:
    """
    Sensitivity overrides. Every key is optional; an unset key resolves to
    THRESHOLD_DEFAULTS inside the rule that reads it.
    """
    growth_significant: Optional[float] = None
    trend_stable: Optional[float] = None
    concentration_pareto: Optional[float] = None
    min_data_points: Optional[int] = None
    upsell_liquidity: Optional[float] = None
    cash_flow_risk: Optional[float] = None

    def get(self, key: str) -> float:
        value = getattr(self, key)
        return THRESHOLD_DEFAULTS[key] if value is None else value

    def as_dict(self) -> Dict[str, float]:
        return {key: self.get(key) for key in THRESHOLD_DEFAULTS}

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "Thresholds":
        """Accepts snake_case or the camelCase keys stored by older clients."""
        if not raw:
            return cls()
        values: Dict[str, Any] = {}
        for key in THRESHOLD_DEFAULTS:
            camel = _camel(key)
            value = raw.get(key, raw.get(camel))
            if value is None:
                continue
            try:
                values[key] = int(value) if key == "min_data_points" else float(value)
            except (TypeError, ValueError):
                continue
        return cls(**values)


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(frozen=True)
class TermLabels:
    singular: str = "gasto"
    plural: str = "gastos"
    verb_increase: str = "aumenta"
    verb_decrease: str = "disminuye"


EXPENSE_TERMS = TermLabels()
INCOME_TERMS = TermLabels(singular="ingreso", plural="ingresos")


def infer_polarity(labels: TermLabels) -> Polarity:
    """Backward-compatible mapping for contexts that do not declare a polarity."""
    if "ingres" in (labels.singular or "").lower():
        return Polarity.INCREASE_IS_GOOD
    return Polarity.INCREASE_IS_BAD


@dataclass(frozen=True)
class InsightContext:
    monthly_data: Sequence[MonthlyPoint] = ()
    category_data: Sequence[CategoryPoint] = ()
    previous_category_data: Optional[Sequence[CategoryPoint]] = None
    client_summaries: Optional[Sequence[ClientSummary]] = None

    total_value: Optional[float] = None
    payment_count: Optional[int] = None
    month_count: Optional[int] = None
    current_month: Optional[int] = None  # 1-12
    is_short_period: bool = False

    thresholds: Thresholds = field(default_factory=Thresholds)
    term_labels: TermLabels = field(default_factory=TermLabels)
    polarity: Optional[Polarity] = None

    def threshold(self, key: str) -> float:
        return self.thresholds.get(key)

    @property
    def effective_polarity(self) -> Polarity:
        return self.polarity or infer_polarity(self.term_labels)

    @property
    def effective_month_count(self) -> int:
        return len(self.monthly_data) if self.month_count is None else int(self.month_count)


# ----------------------------
# Output records
# ----------------------------

@dataclass(frozen=True)
class InsightAction:
    id: str
    label: str
    type: ActionType
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Insight:
    id: str
    title: str
    description: str
    severity: Severity
    icon: Optional[str] = None
    priority: Optional[int] = None
    context: Optional[str] = None
    action_hint: Optional[str] = None
    actions: Tuple[InsightAction, ...] = ()

    @property
    def rank(self) -> int:
        return DEFAULT_PRIORITY if self.priority is None else int(self.priority)


# ----------------------------
# Admin analytics input
# ----------------------------

@dataclass(frozen=True)
class AdminKpis:
    total_users: int = 0
    new_users: int = 0
    active_now: int = 0
    total_orgs: int = 0
    total_projects: int = 0
    avg_session_duration: Optional[float] = None  # seconds
    bounce_rate: Optional[float] = None  # percent


@dataclass(frozen=True)
class HourlyActivity:
    hour: str
    value: float


@dataclass(frozen=True)
class GrowthPoint:
    name: str
    users: int


@dataclass(frozen=True)
class TopUser:
    id: str
    name: str
    sessions: int


@dataclass(frozen=True)
class DroppedUser:
    id: str
    name: str
    session_count: int
    last_session: Optional[str] = None


@dataclass(frozen=True)
class AdminInsightInput:
    """Platform-wide KPIs; admin rules read this instead of an InsightContext."""
    kpis: AdminKpis = field(default_factory=AdminKpis)
    engagement: Sequence[CategoryPoint] = ()
    activity_by_hour: Sequence[HourlyActivity] = ()
    user_growth: Sequence[GrowthPoint] = ()
    country_distribution: Sequence[CategoryPoint] = ()
    top_users: Sequence[TopUser] = ()
    drop_off: Sequence[DroppedUser] = ()


Rule = Callable[[Any], Optional[Insight]]
