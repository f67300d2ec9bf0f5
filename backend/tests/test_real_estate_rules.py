from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.insights.rules.real_estate import (  # noqa: E402
    cash_flow_risk_insight,
    upsell_liquidity_insight,
)
from backend.app.insights.types import ClientSummary, InsightContext, Thresholds  # noqa: E402


def _client(client_id, committed, paid):
    return ClientSummary(
        id=client_id,
        total_committed=committed,
        total_paid=paid,
        balance_due=committed - paid,
    )


def test_one_liquid_client_is_one_opportunity():
    ctx = InsightContext(client_summaries=(_client("c1", 100, 95), _client("c2", 100, 10)))

    insight = upsell_liquidity_insight(ctx)

    assert insight.id == "upsell-liquidity"
    assert insight.title == "1 Oportunidad de re-inversión"
    assert insight.severity == "positive"
    assert insight.priority == 30
    assert insight.actions[0].payload == {"minPaid": 90.0}


def test_several_liquid_clients_pluralize():
    ctx = InsightContext(client_summaries=(_client("c1", 100, 95), _client("c2", 200, 180)))

    assert upsell_liquidity_insight(ctx).title == "2 Oportunidades de re-inversión"


def test_upsell_threshold_is_inclusive_and_configurable():
    exactly = InsightContext(client_summaries=(_client("c1", 100, 90),))
    stricter = InsightContext(client_summaries=(_client("c1", 100, 95),), thresholds=Thresholds(upsell_liquidity=96))

    assert upsell_liquidity_insight(exactly) is not None
    assert upsell_liquidity_insight(stricter) is None


def test_upsell_ignores_clients_without_commitment():
    assert upsell_liquidity_insight(InsightContext()) is None
    assert upsell_liquidity_insight(InsightContext(client_summaries=())) is None
    assert upsell_liquidity_insight(InsightContext(client_summaries=(_client("c1", 0, 0),))) is None


def test_cash_flow_risk_defaults_to_eighty_percent():
    ctx = InsightContext(client_summaries=(_client("c1", 1000, 200), _client("c2", 1000, 500)))

    insight = cash_flow_risk_insight(ctx)

    assert insight.id == "cash-flow-risk"
    assert insight.severity == "warning"
    assert insight.priority == 40
    assert insight.description.startswith("1 cliente adeuda")
    assert insight.actions[0].payload == {"minUnpaid": 80.0}


def test_cash_flow_risk_threshold_is_configurable():
    ctx = InsightContext(
        client_summaries=(_client("c1", 1000, 150),),
        thresholds=Thresholds(cash_flow_risk=90),
    )

    assert cash_flow_risk_insight(ctx) is None


def test_cash_flow_risk_none_when_all_clients_are_paying():
    ctx = InsightContext(client_summaries=(_client("c1", 1000, 900),))

    assert cash_flow_risk_insight(ctx) is None
