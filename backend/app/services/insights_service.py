from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from backend.app.api.config import insights_max_results
from backend.app.domain.contracts import (
    AdminInsightsRequest,
    ClientInsightsRequest,
    FinanceInsightsRequest,
    GeneralCostsInsightsRequest,
    MaterialInsightsRequest,
    RealEstateInsightsRequest,
)
from backend.app.insights import (
    generate_admin_insights,
    generate_client_insights,
    generate_finance_insights,
    generate_general_costs_insights,
    generate_material_insights,
    generate_real_estate_insights,
    insights_as_dicts,
)
from backend.app.insights.adapters.clients import DEFAULT_LIMIT as CLIENTS_DEFAULT_LIMIT
from backend.app.insights.adapters.finance import DEFAULT_LIMIT as FINANCE_DEFAULT_LIMIT
from backend.app.insights.types import Insight, Thresholds
from backend.app.services import insight_config_service


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainSpec:
    request_model: Type[BaseModel]
    run: Callable[[Any, Thresholds], List[Insight]]
    default_limit: Optional[int] = None


def _clients(req: ClientInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    return generate_client_insights(
        req.summaries,
        req.payments,
        previous_payments=req.previous_payments,
        thresholds=thresholds,
        as_of=req.as_of,
        current_month=req.current_month,
        is_short_period=req.is_short_period,
        limit=None,
    )


def _real_estate(req: RealEstateInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    return generate_real_estate_insights(
        req.summaries,
        req.payments,
        previous_payments=req.previous_payments,
        thresholds=thresholds,
        current_month=req.current_month,
        is_short_period=req.is_short_period,
        limit=None,
    )


def _materials(req: MaterialInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    return generate_material_insights(
        req.payments,
        previous_payments=req.previous_payments,
        thresholds=thresholds,
        current_month=req.current_month,
        is_short_period=req.is_short_period,
        limit=None,
    )


def _general_costs(req: GeneralCostsInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    return generate_general_costs_insights(
        req.monthly_summary,
        req.by_category,
        previous_by_category=req.previous_by_category,
        thresholds=thresholds,
        current_month=req.current_month,
        is_short_period=req.is_short_period,
        limit=None,
    )


def _finance(req: FinanceInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    return generate_finance_insights(
        req.movements,
        req.wallets,
        thresholds=thresholds,
        as_of=req.as_of,
        current_month=req.current_month,
        is_short_period=req.is_short_period,
        limit=None,
    )


def _admin(req: AdminInsightsRequest, thresholds: Thresholds) -> List[Insight]:
    # Admin rules use fixed platform thresholds.
    return generate_admin_insights(req.model_dump())


DOMAINS: Dict[str, DomainSpec] = {
    "clients": DomainSpec(ClientInsightsRequest, _clients, CLIENTS_DEFAULT_LIMIT),
    "real_estate": DomainSpec(RealEstateInsightsRequest, _real_estate),
    "materials": DomainSpec(MaterialInsightsRequest, _materials),
    "general_costs": DomainSpec(GeneralCostsInsightsRequest, _general_costs),
    "finance": DomainSpec(FinanceInsightsRequest, _finance, FINANCE_DEFAULT_LIMIT),
    "admin": DomainSpec(AdminInsightsRequest, _admin),
}


def list_domains() -> List[str]:
    return sorted(DOMAINS)


def _resolve_limit(spec: DomainSpec, requested: Optional[int]) -> Optional[int]:
    if requested is not None:
        return requested
    if spec.default_limit is not None:
        return spec.default_limit
    return insights_max_results()


def generate_for_domain(
    db: Session,
    domain: str,
    payload: Optional[Dict[str, Any]],
    *,
    organization_id: Optional[str] = None,
    scope: Optional[str] = None,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    spec = DOMAINS.get(domain)
    if spec is None:
        raise HTTPException(status_code=404, detail=f"unknown insight domain: {domain}")

    try:
        request = spec.request_model.model_validate(payload or {})
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc

    thresholds = insight_config_service.load_thresholds(db, organization_id) if organization_id else Thresholds()

    # Truncate after dismissals are removed so a dismissed card frees its slot.
    insights = spec.run(request, thresholds)
    dismissed = 0
    if organization_id:
        hidden = insight_config_service.dismissed_ids(db, organization_id, scope or domain)
        kept = [i for i in insights if i.id not in hidden]
        dismissed = len(insights) - len(kept)
        insights = kept

    cap = _resolve_limit(spec, limit)
    if cap is not None:
        insights = insights[: max(0, cap)]

    logger.debug("insights domain=%s count=%s dismissed=%s", domain, len(insights), dismissed)

    return {
        "insights": insights_as_dicts(insights),
        "meta": {"domain": domain, "count": len(insights), "dismissed": dismissed},
    }
