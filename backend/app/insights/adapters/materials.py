"""
Materials adapter.

Material payments are expenses: an increase is bad news. Categories come from
the material category label on each payment row.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from ..engine import evaluate
from ..rules import CORE_RULES
from ..types import EXPENSE_TERMS, Insight, InsightContext, Polarity, Thresholds
from .common import effective_amount, field_of, group_categories, group_monthly, label_of, month_key

UNCATEGORIZED = "Sin categoría"


def _counts(payment: Any) -> bool:
    if field_of(payment, "is_deleted"):
        return False
    return field_of(payment, "status") in (None, "", "confirmed")


def _category(payment: Any) -> str:
    raw = field_of(payment, "category_name")
    if raw is None:
        raw = field_of(payment, "material_category_name")
    return label_of(raw, UNCATEGORIZED)


def build_material_context(
    payments: Optional[Iterable[Any]],
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
) -> InsightContext:
    rows = [p for p in (payments or ()) if _counts(p)]
    monthly = group_monthly((month_key(field_of(p, "payment_date")), effective_amount(p)) for p in rows)
    categories = group_categories((_category(p), effective_amount(p)) for p in rows)

    previous = None
    if previous_payments is not None:
        previous = group_categories(
            (_category(p), effective_amount(p)) for p in previous_payments if _counts(p)
        )

    return InsightContext(
        monthly_data=tuple(monthly),
        category_data=tuple(categories),
        previous_category_data=None if previous is None else tuple(previous),
        total_value=sum(effective_amount(p) for p in rows),
        payment_count=len(rows),
        month_count=len(monthly),
        current_month=current_month,
        is_short_period=is_short_period,
        thresholds=thresholds or Thresholds(),
        term_labels=EXPENSE_TERMS,
        polarity=Polarity.INCREASE_IS_BAD,
    )


def generate_material_insights(
    payments: Optional[Iterable[Any]],
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
    limit: Optional[int] = None,
) -> List[Insight]:
    context = build_material_context(
        payments,
        previous_payments=previous_payments,
        thresholds=thresholds,
        current_month=current_month,
        is_short_period=is_short_period,
    )
    return evaluate(CORE_RULES, context, limit=limit)
