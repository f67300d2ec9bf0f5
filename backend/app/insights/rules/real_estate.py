from __future__ import annotations

from typing import List, Optional

from ..text import plural, round_half_up
from ..types import ClientSummary, Insight, InsightAction, InsightContext
from . import REAL_ESTATE_RULES


def _committed(context: InsightContext) -> List[ClientSummary]:
    return [c for c in (context.client_summaries or ()) if float(c.total_committed) > 0]


@REAL_ESTATE_RULES.register
def upsell_liquidity_insight(context: InsightContext) -> Optional[Insight]:
    """Clients who have paid most of their commitment are candidates for a new sale."""
    clients = _committed(context)
    if not clients:
        return None

    threshold = context.threshold("upsell_liquidity")
    qualifying = [
        c for c in clients
        if float(c.total_paid) / float(c.total_committed) * 100.0 >= threshold
    ]
    count = len(qualifying)
    if count == 0:
        return None

    return Insight(
        id="upsell-liquidity",
        severity="positive",
        title=f"{count} {plural(count, 'Oportunidad', 'Oportunidades')} de re-inversión",
        description=(
            f"{count} {plural(count, 'cliente pagó', 'clientes pagaron')} "
            f"el {round_half_up(threshold)}% o más de su compromiso."
        ),
        icon="Sparkles",
        priority=30,
        context="Clientes con alta liquidez demostrada son candidatos a una nueva unidad.",
        action_hint="Contactalos con una propuesta de re-inversión.",
        actions=(
            InsightAction(
                id="filter-upsell-clients",
                label="Ver clientes",
                type="filter",
                payload={"minPaid": threshold},
            ),
        ),
    )


@REAL_ESTATE_RULES.register
def cash_flow_risk_insight(context: InsightContext) -> Optional[Insight]:
    """Clients whose unpaid balance is most of their commitment."""
    clients = _committed(context)
    if not clients:
        return None

    threshold = context.threshold("cash_flow_risk")
    exposed = [
        c for c in clients
        if float(c.balance_due) / float(c.total_committed) * 100.0 >= threshold
    ]
    count = len(exposed)
    if count == 0:
        return None

    exposure = sum(float(c.balance_due) for c in exposed)
    return Insight(
        id="cash-flow-risk",
        severity="warning",
        title="Riesgo de flujo de caja",
        description=(
            f"{count} {plural(count, 'cliente adeuda', 'clientes adeudan')} "
            f"el {round_half_up(threshold)}% o más de su compromiso."
        ),
        icon="AlertTriangle",
        priority=40,
        context=f"Saldo expuesto: {exposure:,.2f}.",
        action_hint="Revisá el cronograma de cobros de estos clientes.",
        actions=(
            InsightAction(
                id="filter-exposed-clients",
                label="Ver clientes",
                type="filter",
                payload={"minUnpaid": threshold},
            ),
        ),
    )
