from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# -------------------------
# Insight output
# -------------------------

class InsightActionContract(BaseModel):
    id: str
    label: str
    type: Literal["navigate", "filter", "open"]
    payload: Dict[str, Any] = Field(default_factory=dict)


class InsightResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    severity: Literal["info", "warning", "critical", "positive"]
    icon: Optional[str] = None
    priority: Optional[int] = None
    context: Optional[str] = None
    action_hint: Optional[str] = Field(default=None, alias="actionHint")
    actions: List[InsightActionContract] = Field(default_factory=list)


class InsightListMeta(BaseModel):
    domain: str
    count: int
    dismissed: int = 0


class InsightListResponse(BaseModel):
    insights: List[InsightResult]
    meta: InsightListMeta


# -------------------------
# Thresholds / config
# -------------------------

class InsightThresholdsContract(BaseModel):
    """Partial threshold overrides; omitted keys keep their current value."""
    model_config = ConfigDict(extra="forbid")

    growth_significant: Optional[float] = Field(default=None, gt=0, le=1000)
    trend_stable: Optional[float] = Field(default=None, ge=0, le=100)
    concentration_pareto: Optional[float] = Field(default=None, gt=0, le=100)
    min_data_points: Optional[int] = Field(default=None, ge=2, le=36)
    upsell_liquidity: Optional[float] = Field(default=None, gt=0, le=100)
    cash_flow_risk: Optional[float] = Field(default=None, gt=0, le=100)


class InsightConfigOut(BaseModel):
    organization_id: str
    thresholds: Dict[str, float]
    overrides: Dict[str, float]
    custom_thresholds_enabled: bool
    updated_at: Optional[datetime] = None


# -------------------------
# Dismissals
# -------------------------

class InsightDismissalIn(BaseModel):
    organization_id: str = Field(min_length=1)
    scope: str = Field(min_length=1)
    insight_id: str = Field(min_length=1)


class InsightDismissalOut(InsightDismissalIn):
    dismissed_at: Optional[datetime] = None


# -------------------------
# Domain inputs
# -------------------------
# Rows stay loosely typed: adapters coerce malformed values instead of rejecting them.

Row = Dict[str, Any]


class PeriodOptions(BaseModel):
    current_month: Optional[int] = Field(default=None, ge=1, le=12)
    is_short_period: bool = False


class ClientInsightsRequest(PeriodOptions):
    summaries: List[Row] = Field(default_factory=list)
    payments: List[Row] = Field(default_factory=list)
    previous_payments: Optional[List[Row]] = None
    as_of: Optional[date] = None


class RealEstateInsightsRequest(PeriodOptions):
    summaries: List[Row] = Field(default_factory=list)
    payments: List[Row] = Field(default_factory=list)
    previous_payments: Optional[List[Row]] = None


class MaterialInsightsRequest(PeriodOptions):
    payments: List[Row] = Field(default_factory=list)
    previous_payments: Optional[List[Row]] = None


class GeneralCostsInsightsRequest(PeriodOptions):
    monthly_summary: List[Row] = Field(default_factory=list)
    by_category: List[Row] = Field(default_factory=list)
    previous_by_category: Optional[List[Row]] = None


class FinanceInsightsRequest(PeriodOptions):
    movements: List[Row] = Field(default_factory=list)
    wallets: List[Row] = Field(default_factory=list)
    as_of: Optional[date] = None


class AdminInsightsRequest(BaseModel):
    kpis: Row = Field(default_factory=dict)
    engagement: List[Row] = Field(default_factory=list)
    activity_by_hour: List[Row] = Field(default_factory=list)
    user_growth: List[Row] = Field(default_factory=list)
    country_distribution: List[Row] = Field(default_factory=list)
    top_users: List[Row] = Field(default_factory=list)
    drop_off: List[Row] = Field(default_factory=list)
