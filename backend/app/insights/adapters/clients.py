"""
Clients adapter.

Inputs are the rows of the client financial summary view and the client
payments view (mappings or attribute-style objects). Only confirmed,
non-deleted payments count. Monetary values must already be expressed in one
comparison currency (`functional_amount` when the caller converted them).
"""

from __future__ import annotations

from datetime import date, timedelta
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..engine import evaluate
from ..rules import CORE_RULES, REAL_ESTATE_RULES
from ..text import format_money, plural
from ..types import (
    INCOME_TERMS,
    ClientSummary,
    Insight,
    InsightAction,
    InsightContext,
    Polarity,
    Thresholds,
)
from .common import (
    effective_amount,
    field_of,
    group_categories,
    group_monthly,
    label_of,
    month_key,
    to_amount,
    to_date,
)

DEFAULT_LIMIT = 5
NO_PAYMENT_WINDOW_DAYS = 30
COUNTED_STATUSES = {None, "", "confirmed"}


def _counts(payment: Any) -> bool:
    if field_of(payment, "is_deleted"):
        return False
    return field_of(payment, "status") in COUNTED_STATUSES


def _confirmed(payments: Optional[Iterable[Any]]) -> List[Any]:
    return [p for p in (payments or ()) if _counts(p)]


def _client_label(payment: Any) -> str:
    return label_of(field_of(payment, "client_name"), "Sin cliente")


def build_client_summaries(rows: Optional[Iterable[Any]]) -> List[ClientSummary]:
    summaries: List[ClientSummary] = []
    for row in rows or ():
        client_id = field_of(row, "client_id")
        if client_id is None:
            continue
        summaries.append(
            ClientSummary(
                id=str(client_id),
                total_committed=to_amount(field_of(row, "total_committed_amount")),
                total_paid=to_amount(field_of(row, "total_paid_amount")),
                balance_due=to_amount(field_of(row, "balance_due")),
                currency_code=field_of(row, "currency_code"),
                name=field_of(row, "client_name"),
            )
        )
    return summaries


def build_client_context(
    summaries: Optional[Iterable[Any]],
    payments: Optional[Iterable[Any]],
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
) -> InsightContext:
    confirmed = _confirmed(payments)
    monthly = group_monthly((month_key(field_of(p, "payment_date")), effective_amount(p)) for p in confirmed)
    categories = group_categories((_client_label(p), effective_amount(p)) for p in confirmed)

    previous = None
    if previous_payments is not None:
        previous = group_categories((_client_label(p), effective_amount(p)) for p in _confirmed(previous_payments))

    return InsightContext(
        monthly_data=tuple(monthly),
        category_data=tuple(categories),
        previous_category_data=None if previous is None else tuple(previous),
        client_summaries=tuple(build_client_summaries(summaries)),
        total_value=sum(effective_amount(p) for p in confirmed),
        payment_count=len(confirmed),
        month_count=len(monthly),
        current_month=current_month,
        is_short_period=is_short_period,
        thresholds=thresholds or Thresholds(),
        term_labels=INCOME_TERMS,
        polarity=Polarity.INCREASE_IS_GOOD,
    )


def _summary_name(summary: ClientSummary) -> str:
    return summary.name or summary.id


def debtors_insight(
    context: InsightContext,
    *,
    format_money: Callable[[float], str] = format_money,
) -> Optional[Insight]:
    summaries = list(context.client_summaries or ())
    debtors = [s for s in summaries if s.balance_due > 0]
    if not debtors:
        return None

    total_due = sum(s.balance_due for s in debtors)
    total_committed = sum(s.total_committed for s in summaries if s.total_committed > 0)
    due_share = total_due / total_committed * 100.0 if total_committed > 0 else 0.0
    top = max(debtors, key=lambda s: s.balance_due)
    count = len(debtors)

    return Insight(
        id="client-debtors",
        severity="warning" if due_share >= 50 else "info",
        title=f"{count} {plural(count, 'cliente con saldo pendiente', 'clientes con saldo pendiente')}",
        description=f"Saldo total por cobrar: {format_money(total_due)}.",
        icon="Wallet",
        priority=2,
        context=f'Mayor saldo: "{_summary_name(top)}" ({format_money(top.balance_due)}).',
        action_hint="Priorizá el seguimiento de los saldos más altos.",
        actions=(
            InsightAction(
                id="view-client-balance",
                label="Ver saldo",
                type="navigate",
                payload={"tab": "balances", "clientId": top.id},
            ),
        ),
    )


def no_recent_payment_insight(
    context: InsightContext,
    *,
    last_payment_by_client: Mapping[str, date],
    as_of: date,
    window_days: int = NO_PAYMENT_WINDOW_DAYS,
) -> Optional[Insight]:
    cutoff = as_of - timedelta(days=window_days)
    stale = [
        s for s in (context.client_summaries or ())
        if s.balance_due > 0
        and (s.id not in last_payment_by_client or last_payment_by_client[s.id] < cutoff)
    ]
    if not stale:
        return None

    count = len(stale)
    first = _summary_name(stale[0])
    more = f" y {count - 1} más" if count > 1 else ""
    return Insight(
        id="no-recent-payment",
        severity="warning",
        title=f"{count} {plural(count, 'cliente sin pagos recientes', 'clientes sin pagos recientes')}",
        description=f'"{first}"{more} no {plural(count, "registra", "registran")} pagos hace más de {window_days} días.',
        icon="Clock",
        priority=2,
        context="Todos tienen saldo pendiente.",
        action_hint="Contactalos para confirmar el próximo pago.",
        actions=(
            InsightAction(
                id="filter-stale-clients",
                label="Ver clientes",
                type="filter",
                payload={"clientIds": [s.id for s in stale]},
            ),
        ),
    )


def _last_payment_by_client(payments: Sequence[Any]) -> Dict[str, date]:
    last: Dict[str, date] = {}
    for p in payments:
        client_id = field_of(p, "client_id")
        paid_on = to_date(field_of(p, "payment_date"))
        if client_id is None or paid_on is None:
            continue
        key = str(client_id)
        if key not in last or paid_on > last[key]:
            last[key] = paid_on
    return last


def generate_client_insights(
    summaries: Optional[Iterable[Any]],
    payments: Optional[Iterable[Any]],
    *,
    previous_payments: Optional[Iterable[Any]] = None,
    thresholds: Optional[Thresholds] = None,
    as_of: Optional[date] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
    format_money: Callable[[float], str] = format_money,
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[Insight]:
    as_of = as_of or date.today()
    payment_rows = list(payments or ())
    context = build_client_context(
        summaries,
        payment_rows,
        previous_payments=previous_payments,
        thresholds=thresholds,
        current_month=current_month if current_month is not None else as_of.month,
        is_short_period=is_short_period,
    )

    debtors = partial(debtors_insight, format_money=format_money)
    stale = partial(
        no_recent_payment_insight,
        last_payment_by_client=_last_payment_by_client(_confirmed(payment_rows)),
        as_of=as_of,
    )

    rules = [debtors, stale, *(CORE_RULES + REAL_ESTATE_RULES)]
    return evaluate(rules, context, limit=limit)
