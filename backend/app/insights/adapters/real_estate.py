"""
Real-estate adapter.

Unit-sale buyers: each summary row is one buyer's commitment on a unit
(committed / paid / balance due); payments are their installments.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from ..engine import evaluate
from ..rules import CORE_RULES, REAL_ESTATE_RULES
from ..types import Insight, InsightContext, Thresholds
from .clients import build_client_context


def build_real_estate_context(
    summaries: Optional[Iterable[Any]],
    payments: Optional[Iterable[Any]] = None,
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
) -> InsightContext:
    return build_client_context(
        summaries,
        payments,
        previous_payments=previous_payments,
        thresholds=thresholds,
        current_month=current_month,
        is_short_period=is_short_period,
    )


def generate_real_estate_insights(
    summaries: Optional[Iterable[Any]],
    payments: Optional[Iterable[Any]] = None,
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
    limit: Optional[int] = None,
) -> List[Insight]:
    context = build_real_estate_context(
        summaries,
        payments,
        previous_payments=previous_payments,
        thresholds=thresholds,
        current_month=current_month,
        is_short_period=is_short_period,
    )
    return evaluate(CORE_RULES + REAL_ESTATE_RULES, context, limit=limit)
