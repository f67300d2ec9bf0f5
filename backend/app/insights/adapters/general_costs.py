"""
General costs adapter.

Reads two pre-aggregated views:
- monthly summary rows: payment_month, total_amount, payments_count
- by-category rows: category_name, total_amount (one row per category and
  month, so the same name may appear several times)
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from ..engine import evaluate
from ..rules import CORE_RULES
from ..types import EXPENSE_TERMS, CategoryPoint, Insight, InsightContext, Polarity, Thresholds
from .common import field_of, group_categories, group_monthly, label_of, month_key, to_amount, to_count

OTHER = "Otros"


def _by_category(rows: Optional[Iterable[Any]]) -> List[CategoryPoint]:
    return group_categories(
        (label_of(field_of(r, "category_name"), OTHER), to_amount(field_of(r, "total_amount")))
        for r in rows or ()
    )


def build_general_costs_context(
    monthly_summary: Optional[Iterable[Any]],
    by_category: Optional[Iterable[Any]],
    *,
    previous_by_category: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
) -> InsightContext:
    summary_rows = list(monthly_summary or ())
    monthly = group_monthly(
        (month_key(field_of(r, "payment_month")), to_amount(field_of(r, "total_amount")))
        for r in summary_rows
    )
    categories = _by_category(by_category)
    previous = None if previous_by_category is None else _by_category(previous_by_category)

    return InsightContext(
        monthly_data=tuple(monthly),
        category_data=tuple(categories),
        previous_category_data=None if previous is None else tuple(previous),
        total_value=sum(point.value for point in monthly),
        payment_count=sum(to_count(field_of(r, "payments_count")) for r in summary_rows),
        month_count=len(monthly),
        current_month=current_month,
        is_short_period=is_short_period,
        thresholds=thresholds or Thresholds(),
        term_labels=EXPENSE_TERMS,
        polarity=Polarity.INCREASE_IS_BAD,
    )


def generate_general_costs_insights(
    monthly_summary: Optional[Iterable[Any]],
    by_category: Optional[Iterable[Any]],
    *,
    previous_by_category: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
    limit: Optional[int] = None,
) -> List[Insight]:
    context = build_general_costs_context(
        monthly_summary,
        by_category,
        previous_by_category=previous_by_category,
        thresholds=thresholds,
        current_month=current_month,
        is_short_period=is_short_period,
    )
    return evaluate(CORE_RULES, context, limit=limit)
