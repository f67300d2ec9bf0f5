"""Admin analytics adapter: coerces the raw dashboard payload into AdminInsightInput."""

from __future__ import annotations

from typing import Any, List, Optional

from ..engine import evaluate
from ..rules import ADMIN_RULES
from ..types import (
    AdminInsightInput,
    AdminKpis,
    CategoryPoint,
    DroppedUser,
    GrowthPoint,
    HourlyActivity,
    Insight,
    TopUser,
)
from .common import field_of, label_of, to_amount, to_count


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else to_amount(value)


def _kpis(raw: Any) -> AdminKpis:
    return AdminKpis(
        total_users=to_count(field_of(raw, "total_users")),
        new_users=to_count(field_of(raw, "new_users")),
        active_now=to_count(field_of(raw, "active_now")),
        total_orgs=to_count(field_of(raw, "total_orgs")),
        total_projects=to_count(field_of(raw, "total_projects")),
        avg_session_duration=_optional_amount(field_of(raw, "avg_session_duration")),
        bounce_rate=_optional_amount(field_of(raw, "bounce_rate")),
    )


def build_admin_input(raw: Any) -> AdminInsightInput:
    if isinstance(raw, AdminInsightInput):
        return raw

    def rows(name: str) -> List[Any]:
        return list(field_of(raw, name) or ())

    return AdminInsightInput(
        kpis=_kpis(field_of(raw, "kpis")),
        engagement=tuple(
            CategoryPoint(name=label_of(field_of(r, "name"), "?"), value=to_amount(field_of(r, "value")))
            for r in rows("engagement")
        ),
        activity_by_hour=tuple(
            HourlyActivity(hour=label_of(field_of(r, "hour"), "?"), value=to_amount(field_of(r, "value")))
            for r in rows("activity_by_hour")
        ),
        user_growth=tuple(
            GrowthPoint(name=label_of(field_of(r, "name"), ""), users=to_count(field_of(r, "users")))
            for r in rows("user_growth")
        ),
        country_distribution=tuple(
            CategoryPoint(name=label_of(field_of(r, "name"), "?"), value=to_amount(field_of(r, "value")))
            for r in rows("country_distribution")
        ),
        top_users=tuple(
            TopUser(
                id=str(field_of(r, "id", "")),
                name=label_of(field_of(r, "name"), ""),
                sessions=to_count(field_of(r, "sessions")),
            )
            for r in rows("top_users")
        ),
        drop_off=tuple(
            DroppedUser(
                id=str(field_of(r, "id", "")),
                name=label_of(field_of(r, "name"), ""),
                session_count=to_count(field_of(r, "session_count")),
                last_session=field_of(r, "last_session"),
            )
            for r in rows("drop_off")
        ),
    )


def generate_admin_insights(data: Any, *, limit: Optional[int] = None) -> List[Insight]:
    return evaluate(ADMIN_RULES, build_admin_input(data), limit=limit)
