"""
Trend detection and year-end projection over monthly series.

Both helpers assume values are ordered oldest -> newest and return None when
the series is too short to say anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from statistics import mean
from typing import List, Literal, Optional, Sequence

from .text import round_half_up
from .types import TermLabels

TrendDirection = Literal["increasing", "decreasing", "stable"]
TrendConfidence = Literal["low", "medium", "high"]
ProjectionDirection = Literal["up", "down", "stable"]


@dataclass(frozen=True)
class TrendResult:
    direction: TrendDirection
    monthly_change_percent: float
    confidence: TrendConfidence
    data_points: int


@dataclass(frozen=True)
class YearEndProjection:
    direction: ProjectionDirection
    change_percent: float
    projected_total: float
    baseline_total: float
    months_remaining: int
    months_observed: int


def _pct_changes(values: Sequence[float]) -> List[float]:
    changes: List[float] = []
    for prev, cur in zip(values, values[1:]):
        if prev == 0:
            continue
        changes.append((cur - prev) / abs(prev) * 100.0)
    return changes


def _confidence(agreeing: int, total: int) -> TrendConfidence:
    if total == 0:
        return "low"
    share = agreeing / total
    if share >= 1.0:
        return "high"
    if share >= 0.6:
        return "medium"
    return "low"


def _slope(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    x = list(range(len(values)))
    x_mean = mean(x)
    y_mean = mean(values)
    num = sum((x[i] - x_mean) * (values[i] - y_mean) for i in range(len(values)))
    den = sum((x[i] - x_mean) ** 2 for i in range(len(values)))
    return num / den if den != 0 else 0.0


def detect_trend_direction(
    values: Sequence[float],
    *,
    min_data_points: int = 3,
    stable_threshold_percent: float = 4.0,
) -> Optional[TrendResult]:
    """
    Direction from the mean month-over-month percent change.

    Months with a zero base are skipped (percent change undefined).
    Confidence is the share of changes agreeing with the reported direction:
    every change agreeing -> high, at least 60% -> medium, else low.
    """
    series = [float(v) for v in values]
    if len(series) < max(2, int(min_data_points)):
        return None

    changes = _pct_changes(series)
    if not changes:
        return None

    avg = mean(changes)
    if abs(avg) <= stable_threshold_percent:
        inside = sum(1 for c in changes if abs(c) <= stable_threshold_percent)
        return TrendResult("stable", avg, _confidence(inside, len(changes)), len(series))

    direction: TrendDirection = "increasing" if avg > 0 else "decreasing"
    agreeing = sum(1 for c in changes if (c > 0 if avg > 0 else c < 0))
    return TrendResult(direction, avg, _confidence(agreeing, len(changes)), len(series))


def project_year_end(
    values: Sequence[float],
    current_month: int,
    *,
    min_data_points: int = 3,
    stable_threshold_percent: float = 4.0,
) -> Optional[YearEndProjection]:
    """
    Extrapolates the observed per-month slope over the months left in the year.

    Formula:
      projected = sum(observed) + sum(max(0, last + slope * k) for k in 1..remaining)
      baseline  = mean(observed) * (observed + remaining)
      change    = (projected - baseline) / baseline
    """
    series = [float(v) for v in values]
    if len(series) < max(2, int(min_data_points)):
        return None
    if not 1 <= int(current_month) <= 12:
        return None

    months_remaining = 12 - int(current_month)
    horizon = len(series) + months_remaining
    baseline = mean(series) * horizon
    if baseline <= 0:
        return None

    slope = _slope(series)
    last = series[-1]
    projected_rest = sum(max(0.0, last + slope * k) for k in range(1, months_remaining + 1))
    projected = sum(series) + projected_rest

    change = (projected - baseline) / baseline * 100.0
    direction: ProjectionDirection = "stable"
    if change > stable_threshold_percent:
        direction = "up"
    elif change < -stable_threshold_percent:
        direction = "down"

    return YearEndProjection(
        direction=direction,
        change_percent=change,
        projected_total=projected,
        baseline_total=baseline,
        months_remaining=months_remaining,
        months_observed=len(series),
    )


def format_projection_text(projection: YearEndProjection, labels: TermLabels) -> str:
    pct = round_half_up(abs(projection.change_percent))
    if projection.direction == "stable":
        return f"Al ritmo actual, el {labels.singular} cerraría el año en línea con el promedio."
    side = "por encima" if projection.direction == "up" else "por debajo"
    return f"Al ritmo actual, el {labels.singular} cerraría el año un {pct}% {side} del promedio mensual."
