# Admin analytics rules: one fixed threshold check each over platform KPIs.
from __future__ import annotations

from typing import Optional

from ..text import round_half_up
from ..types import AdminInsightInput, Insight
from . import ADMIN_RULES


@ADMIN_RULES.register
def peak_activity_insight(data: AdminInsightInput) -> Optional[Insight]:
    hours = list(data.activity_by_hour)
    if not hours:
        return None
    total = sum(float(h.value) for h in hours)
    if total == 0:
        return None

    top = sorted(hours, key=lambda h: float(h.value), reverse=True)[:3]
    peak_pct = round_half_up(sum(float(h.value) for h in top) / total * 100.0)
    if peak_pct < 30:
        return None

    peak_range = ", ".join(h.hour for h in top)
    return Insight(
        id="peak-activity-hours",
        severity="info",
        title="Horario pico detectado",
        description=f"El {peak_pct}% de la actividad ocurre a las {peak_range}hs.",
        icon="Clock",
        priority=3,
        action_hint="Programá notificaciones y emails en ese horario.",
    )


@ADMIN_RULES.register
def accelerated_growth_insight(data: AdminInsightInput) -> Optional[Insight]:
    growth = list(data.user_growth)
    if len(growth) < 2:
        return None

    current = growth[-1].users
    previous = [g.users for g in growth[:-1]]
    average = sum(previous) / len(previous)
    if average == 0:
        return None

    growth_pct = round_half_up((current - average) / average * 100.0)
    if growth_pct < 50:
        return None

    return Insight(
        id="accelerated-growth",
        severity="positive",
        title="Crecimiento acelerado",
        description=(
            f"Este mes: {current} usuarios nuevos, {growth_pct}% más que el promedio "
            f"({round_half_up(average)})."
        ),
        icon="TrendingUp",
        priority=1,
        action_hint="¡Buen momento para lanzar nuevas features!",
    )


@ADMIN_RULES.register
def emerging_market_insight(data: AdminInsightInput) -> Optional[Insight]:
    countries = list(data.country_distribution)
    if len(countries) < 2:
        return None
    total = sum(float(c.value) for c in countries)
    if total < 10:
        return None

    emerging = next(
        (c for c in countries if 10 <= float(c.value) / total * 100.0 <= 35 and float(c.value) >= 3),
        None,
    )
    if emerging is None:
        return None

    share = round_half_up(float(emerging.value) / total * 100.0)
    return Insight(
        id="emerging-market",
        severity="info",
        title="Mercado en crecimiento",
        description=f"{emerging.name} representa el {share}% de usuarios ({int(emerging.value)}).",
        icon="Globe",
        priority=4,
        action_hint="Considerá contenido localizado para ese mercado.",
    )


@ADMIN_RULES.register
def churn_alert_insight(data: AdminInsightInput) -> Optional[Insight]:
    # Only users that were active before (3+ sessions) count as churn risk.
    at_risk = [u for u in data.drop_off if u.session_count >= 3]
    if len(at_risk) < 2:
        return None

    return Insight(
        id="churn-alert",
        severity="warning",
        title="Usuarios en riesgo de abandono",
        description=f"{len(at_risk)} usuarios activos no han vuelto en 7+ días.",
        icon="UserMinus",
        priority=2,
        action_hint="Considerá enviar email de re-engagement.",
    )


@ADMIN_RULES.register
def popular_feature_insight(data: AdminInsightInput) -> Optional[Insight]:
    views = list(data.engagement)
    if not views:
        return None
    total = sum(float(v.value) for v in views)
    if total == 0:
        return None

    top = max(views, key=lambda v: float(v.value))
    share = round_half_up(float(top.value) / total * 100.0)
    if share < 20:
        return None

    return Insight(
        id="popular-feature",
        severity="positive",
        title="Feature más popular",
        description=f'"{top.name}" concentra el {share}% del uso total.',
        icon="Star",
        priority=5,
        action_hint="Es tu feature principal, priorizá mejoras ahí.",
    )


@ADMIN_RULES.register
def short_sessions_insight(data: AdminInsightInput) -> Optional[Insight]:
    duration = data.kpis.avg_session_duration
    if duration is None or duration >= 60:
        return None

    return Insight(
        id="short-sessions",
        severity="warning",
        title="Sesiones demasiado cortas",
        description=f"Duración promedio: {round_half_up(duration)}s. Puede indicar problemas de UX.",
        icon="Timer",
        priority=2,
        action_hint="Verificá el onboarding y tiempo de carga.",
    )


@ADMIN_RULES.register
def high_bounce_rate_insight(data: AdminInsightInput) -> Optional[Insight]:
    bounce = data.kpis.bounce_rate
    if bounce is None or bounce < 50:
        return None

    return Insight(
        id="high-bounce-rate",
        severity="critical" if bounce >= 65 else "warning",
        title="Bounce rate elevado",
        description=f"{round_half_up(bounce)}% de usuarios abandonan rápidamente.",
        icon="DoorOpen",
        priority=1,
        action_hint="Revisá el onboarding y primera impresión.",
    )


@ADMIN_RULES.register
def users_per_org_insight(data: AdminInsightInput) -> Optional[Insight]:
    if data.kpis.total_orgs == 0:
        return None
    ratio = data.kpis.total_users / data.kpis.total_orgs
    if ratio >= 2:
        return None

    return Insight(
        id="low-users-per-org",
        severity="info",
        title="Equipos pequeños",
        description=f"Promedio: {ratio:.1f} usuarios por organización.",
        icon="Users",
        priority=4,
        action_hint="Promové las invitaciones de equipo.",
    )


@ADMIN_RULES.register
def underutilized_feature_insight(data: AdminInsightInput) -> Optional[Insight]:
    views = list(data.engagement)
    if len(views) < 3:
        return None
    total = sum(float(v.value) for v in views)
    if total == 0:
        return None

    lowest = min(views, key=lambda v: float(v.value))
    share = round_half_up(float(lowest.value) / total * 100.0)
    if share >= 5:
        return None

    return Insight(
        id="underutilized-feature",
        severity="info",
        title="Feature subutilizado",
        description=f'"{lowest.name}" tiene solo {share}% del tráfico.',
        icon="EyeOff",
        priority=5,
        action_hint="Considerá destacarlo más o mejorar su UX.",
    )


@ADMIN_RULES.register
def top_users_concentration_insight(data: AdminInsightInput) -> Optional[Insight]:
    users = list(data.top_users)
    if len(users) < 3 or data.kpis.total_users < 10:
        return None

    total_sessions = sum(u.sessions for u in users)
    if total_sessions == 0:
        return None

    top_sessions = sum(u.sessions for u in users[:3])
    concentration = round_half_up(top_sessions / total_sessions * 100.0)
    if concentration < 50:
        return None

    return Insight(
        id="top-users-concentration",
        severity="warning" if concentration > 70 else "info",
        title="Actividad concentrada",
        description=f"Los top 3 usuarios generan el {concentration}% de las sesiones.",
        icon="Crown",
        priority=3,
        action_hint="Riesgo de dependencia en pocos usuarios.",
    )
