from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from ..text import round_half_up
from ..trend import detect_trend_direction, format_projection_text, project_year_end
from ..types import Insight, InsightAction, InsightContext, Polarity, Severity
from . import CORE_RULES

# A driver category must explain at least this share of the absolute change.
MIN_DRIVER_SHARE_PCT = 25
# Accumulated share may undershoot the Pareto threshold by at most this many points.
PARETO_SLACK_PCT = 10
MAX_PARETO_CATEGORIES = 3
# No year-end projection from November on.
LAST_PROJECTION_MONTH = 10


def _trend_severity(is_up: bool, polarity: Polarity) -> Severity:
    if polarity == Polarity.INCREASE_IS_GOOD:
        return "positive" if is_up else "warning"
    return "warning" if is_up else "info"


def _monthly_chart_action() -> InsightAction:
    return InsightAction(
        id="view-monthly-trend",
        label="Ver evolución",
        type="open",
        payload={"panel": "monthlyChart"},
    )


def _min_points(context: InsightContext) -> int:
    return int(context.threshold("min_data_points"))


@CORE_RULES.register
def growth_explained_insight(context: InsightContext) -> Optional[Insight]:
    """
    Growth explained: which category drives most of the period-over-period change.

    growth = (total_value - sum(previous)) / sum(previous)
    Growth exactly at the significance threshold does not trigger.
    """
    if not context.previous_category_data or not context.total_value:
        return None

    previous_total = sum(float(c.value) for c in context.previous_category_data)
    if previous_total == 0:
        return None

    total = float(context.total_value)
    absolute_change = total - previous_total
    growth_rate = round(absolute_change * 100.0 / previous_total, 9)
    if abs(growth_rate) <= context.threshold("growth_significant"):
        return None

    previous_by_name: Dict[str, float] = {c.name: float(c.value) for c in context.previous_category_data}

    driver_name: Optional[str] = None
    driver_delta = 0.0
    for category in context.category_data:
        delta = float(category.value) - previous_by_name.get(category.name, 0.0)
        if (growth_rate > 0 and delta > driver_delta) or (growth_rate < 0 and delta < driver_delta):
            driver_delta = delta
            driver_name = category.name

    if driver_name is None:
        return None

    impact_pct = round_half_up(abs(driver_delta / absolute_change) * 100.0)
    if impact_pct < MIN_DRIVER_SHARE_PCT:
        return None

    labels = context.term_labels
    growth_pct = round_half_up(abs(growth_rate))
    action = InsightAction(
        id="view-category-concepts",
        label="Ver conceptos",
        type="navigate",
        payload={"tab": "concepts", "filterCategory": driver_name},
    )

    if growth_rate > 0:
        return Insight(
            id="growth-explained-increase",
            severity="warning",
            title="Origen del aumento identificado",
            description=f'El {impact_pct}% del aumento proviene de "{driver_name}" en este período.',
            icon="TrendingUp",
            priority=1,
            context=f"El {labels.singular} total {labels.verb_increase} un {growth_pct}% respecto al período anterior.",
            action_hint=f'Revisá los conceptos de "{driver_name}" en este período.',
            actions=(action,),
        )

    return Insight(
        id="growth-explained-decrease",
        severity="info",
        title="Origen de la reducción identificado",
        description=f'El {impact_pct}% de la reducción proviene de "{driver_name}".',
        icon="TrendingDown",
        priority=3,
        context=f"El {labels.singular} total {labels.verb_decrease} un {growth_pct}% respecto al período anterior.",
        action_hint=f'Revisá los conceptos de "{driver_name}" en este período.',
        actions=(action,),
    )


@CORE_RULES.register
def concentration_narrative_insight(context: InsightContext) -> Optional[Insight]:
    """
    Pareto concentration: how few categories reach the configured share.

    Skipped when more than three categories are needed, or when the running
    share ends more than ten points below the threshold.
    """
    categories = list(context.category_data)
    if len(categories) < 2:
        return None

    total = sum(float(c.value) for c in categories)
    if total == 0:
        return None

    ranked = sorted(categories, key=lambda c: float(c.value), reverse=True)
    threshold = context.threshold("concentration_pareto")

    accumulated = 0.0
    needed = 0
    for category in ranked:
        accumulated += float(category.value) * 100.0 / total
        needed += 1
        if accumulated >= threshold:
            break

    if needed > MAX_PARETO_CATEGORIES or accumulated < threshold - PARETO_SLACK_PCT:
        return None

    labels = context.term_labels
    top = ranked[0]
    accumulated_pct = round_half_up(accumulated)
    action = InsightAction(
        id="filter-category",
        label="Ver en gráfico",
        type="filter",
        payload={"category": top.name},
    )

    if needed == 1:
        return Insight(
            id="concentration-single",
            severity="critical",
            title="Concentración crítica",
            description=(
                f'Una sola categoría ("{top.name}") concentra el {accumulated_pct}% '
                f"del {labels.singular} total."
            ),
            icon="AlertTriangle",
            priority=1,
            context=f'"{top.name}" lidera con el {accumulated_pct}%.',
            action_hint=f'Revisá "{top.name}" en el gráfico de categorías.',
            actions=(action,),
        )

    top_pct = round_half_up(float(top.value) * 100.0 / total)
    return Insight(
        id="concentration-few",
        severity="warning",
        title=f"Alta concentración del {labels.singular}",
        description=f"{needed} categorías concentran el {accumulated_pct}% del {labels.singular} total.",
        icon="PieChart",
        priority=2,
        context=f'"{top.name}" lidera con el {top_pct}%.',
        action_hint=f'Revisá "{top.name}" en el gráfico de categorías.',
        actions=(action,),
    )


@CORE_RULES.register
def sustained_trend_insight(context: InsightContext) -> Optional[Insight]:
    min_points = _min_points(context)
    if context.is_short_period:
        return None
    if context.effective_month_count < min_points or len(context.monthly_data) < min_points:
        return None

    trend = detect_trend_direction(
        [float(m.value) for m in context.monthly_data],
        min_data_points=min_points,
        stable_threshold_percent=context.threshold("trend_stable"),
    )
    if trend is None or trend.direction == "stable" or trend.confidence == "low":
        return None

    change_pct = abs(trend.monthly_change_percent)
    if change_pct < context.threshold("growth_significant") / 3:
        return None

    labels = context.term_labels
    is_up = trend.direction == "increasing"
    polarity = context.effective_polarity
    confidence_text = "consistente" if trend.confidence == "high" else "moderada"

    if is_up:
        hint = (
            "Revisá qué categorías están impulsando el aumento."
            if polarity == Polarity.INCREASE_IS_BAD
            else "Buen momento para consolidar lo que está funcionando."
        )
    else:
        hint = (
            "Verificá si esta reducción es planificada."
            if polarity == Polarity.INCREASE_IS_BAD
            else "Revisá qué explica la caída antes de que se sostenga."
        )

    return Insight(
        id="sustained-trend-up" if is_up else "sustained-trend-down",
        severity=_trend_severity(is_up, polarity),
        title="Tendencia de aumento sostenido" if is_up else "Tendencia de reducción sostenida",
        description=(
            f"El {labels.singular} {labels.verb_increase if is_up else labels.verb_decrease} "
            f"~{round_half_up(change_pct)}% mensual en promedio."
        ),
        icon="TrendingUp" if is_up else "TrendingDown",
        priority=2,
        context=f"Tendencia {confidence_text} basada en {len(context.monthly_data)} meses de datos.",
        action_hint=hint,
        actions=(_monthly_chart_action(),),
    )


@CORE_RULES.register
def year_end_projection_insight(context: InsightContext) -> Optional[Insight]:
    min_points = _min_points(context)
    if context.is_short_period:
        return None
    if context.effective_month_count < min_points or len(context.monthly_data) < min_points:
        return None

    current_month = date.today().month if context.current_month is None else int(context.current_month)
    if current_month > LAST_PROJECTION_MONTH:
        return None

    values = [float(m.value) for m in context.monthly_data]
    projection = project_year_end(
        values,
        current_month,
        min_data_points=min_points,
        stable_threshold_percent=context.threshold("trend_stable"),
    )
    if projection is None or projection.direction == "stable":
        return None
    if abs(projection.change_percent) < context.threshold("growth_significant") / 3:
        return None

    labels = context.term_labels
    is_up = projection.direction == "up"
    polarity = context.effective_polarity
    if polarity == Polarity.INCREASE_IS_BAD:
        hint = (
            "Considerá ajustar el presupuesto si el aumento no es planificado."
            if is_up
            else f"El {labels.singular} proyectado está por debajo del promedio histórico."
        )
    else:
        hint = (
            f"El {labels.singular} proyectado supera el promedio histórico."
            if is_up
            else "Revisá el plan de cobros para el resto del año."
        )

    return Insight(
        id="year-end-projection-up" if is_up else "year-end-projection-down",
        severity=_trend_severity(is_up, polarity),
        title="Proyección de cierre anual",
        description=format_projection_text(projection, labels),
        icon="Calendar",
        priority=3,
        context=(
            f"Proyección basada en {len(values)} meses del año actual, "
            f"quedan {projection.months_remaining} meses."
        ),
        action_hint=hint,
        actions=(_monthly_chart_action(),),
    )
