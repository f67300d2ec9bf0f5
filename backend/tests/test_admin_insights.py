from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.insights.adapters.admin import build_admin_input, generate_admin_insights  # noqa: E402
from backend.app.insights.rules.admin import (  # noqa: E402
    high_bounce_rate_insight,
    short_sessions_insight,
    top_users_concentration_insight,
)
from backend.app.insights.types import AdminInsightInput, AdminKpis, TopUser  # noqa: E402


def _ids(data):
    return {i.id for i in generate_admin_insights(data)}


def _by_id(data):
    return {i.id: i for i in generate_admin_insights(data)}


def test_bounce_rate_bands():
    assert high_bounce_rate_insight(AdminInsightInput(kpis=AdminKpis(bounce_rate=49))) is None
    assert high_bounce_rate_insight(AdminInsightInput(kpis=AdminKpis(bounce_rate=55))).severity == "warning"
    assert high_bounce_rate_insight(AdminInsightInput(kpis=AdminKpis(bounce_rate=65))).severity == "critical"
    assert high_bounce_rate_insight(AdminInsightInput(kpis=AdminKpis(bounce_rate=None))) is None


def test_short_sessions():
    insight = short_sessions_insight(AdminInsightInput(kpis=AdminKpis(avg_session_duration=45)))

    assert insight.severity == "warning"
    assert "45s" in insight.description
    assert short_sessions_insight(AdminInsightInput(kpis=AdminKpis(avg_session_duration=60))) is None
    assert short_sessions_insight(AdminInsightInput()) is None


def test_peak_hours():
    data = {
        "activity_by_hour": [
            {"hour": "10", "value": 50},
            {"hour": "11", "value": 30},
            {"hour": "12", "value": 20},
            {"hour": "13", "value": 100},
        ]
    }

    insight = _by_id(data)["peak-activity-hours"]

    assert insight.description == "El 90% de la actividad ocurre a las 13, 10, 11hs."


def test_accelerated_growth():
    data = {"user_growth": [{"name": "Ene", "users": 10}, {"name": "Feb", "users": 10}, {"name": "Mar", "users": 20}]}

    insight = _by_id(data)["accelerated-growth"]

    assert insight.severity == "positive"
    assert insight.priority == 1
    assert "20 usuarios nuevos, 100% más que el promedio (10)" in insight.description


def test_emerging_market():
    data = {"country_distribution": [{"name": "AR", "value": 20}, {"name": "MX", "value": 5}]}

    insight = _by_id(data)["emerging-market"]

    assert insight.description.startswith("MX representa el 20% de usuarios (5)")


def test_churn_needs_two_previously_active_users():
    two = {"drop_off": [{"id": "1", "name": "a", "session_count": 3}, {"id": "2", "name": "b", "session_count": 8}]}
    one = {"drop_off": [{"id": "1", "name": "a", "session_count": 3}, {"id": "2", "name": "b", "session_count": 1}]}

    assert "churn-alert" in _ids(two)
    assert "churn-alert" not in _ids(one)


def test_feature_usage_extremes():
    data = {
        "engagement": [
            {"name": "Dashboard", "value": 70},
            {"name": "Reportes", "value": 27},
            {"name": "Ajustes", "value": 3},
        ]
    }

    by_id = _by_id(data)

    assert '"Dashboard" concentra el 70%' in by_id["popular-feature"].description
    assert '"Ajustes" tiene solo 3%' in by_id["underutilized-feature"].description


def test_small_teams():
    insight = _by_id({"kpis": {"total_users": 3, "total_orgs": 2}})["low-users-per-org"]

    assert insight.description == "Promedio: 1.5 usuarios por organización."


def test_top_user_concentration_bands():
    heavy = AdminInsightInput(
        kpis=AdminKpis(total_users=20),
        top_users=tuple(TopUser(id=str(i), name=f"u{i}", sessions=s) for i, s in enumerate([40, 20, 10, 5, 5])),
    )
    even = AdminInsightInput(
        kpis=AdminKpis(total_users=20),
        top_users=tuple(TopUser(id=str(i), name=f"u{i}", sessions=10) for i in range(6)),
    )
    tiny = AdminInsightInput(kpis=AdminKpis(total_users=5), top_users=heavy.top_users)

    assert top_users_concentration_insight(heavy).severity == "warning"
    assert top_users_concentration_insight(even).severity == "info"
    assert top_users_concentration_insight(tiny) is None


def test_input_coercion_and_ordering():
    data = build_admin_input({"kpis": {"total_users": "12", "bounce_rate": "70.4", "total_orgs": None}})

    assert data.kpis.total_users == 12
    assert data.kpis.bounce_rate == 70.4
    assert data.kpis.total_orgs == 0

    insights = generate_admin_insights(
        {"kpis": {"bounce_rate": 70, "avg_session_duration": 30}, "drop_off": []}
    )
    assert [i.id for i in insights] == ["high-bounce-rate", "short-sessions"]


def test_empty_payload_has_no_insights():
    assert generate_admin_insights({}) == []
