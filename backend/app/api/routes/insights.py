from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import (
    InsightConfigOut,
    InsightDismissalIn,
    InsightDismissalOut,
    InsightListResponse,
    InsightThresholdsContract,
)
from backend.app.services import insight_config_service, insights_service

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.get("/domains", response_model=List[str])
def list_domains():
    return insights_service.list_domains()


@router.get("/config/{organization_id}", response_model=InsightConfigOut)
def get_insight_config(organization_id: str, db: Session = Depends(get_db)):
    return insight_config_service.get_config(db, organization_id)


@router.put("/config/{organization_id}", response_model=InsightConfigOut)
def update_insight_config(
    organization_id: str,
    req: InsightThresholdsContract,
    db: Session = Depends(get_db),
):
    return insight_config_service.update_config(db, organization_id, req.model_dump(exclude_unset=True))


@router.post("/dismissals", response_model=InsightDismissalOut)
def dismiss_insight(req: InsightDismissalIn, db: Session = Depends(get_db)):
    return insight_config_service.dismiss(db, req.organization_id, req.scope, req.insight_id)


@router.get("/dismissals", response_model=List[InsightDismissalOut])
def list_dismissals(
    organization_id: str = Query(..., min_length=1),
    scope: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    return insight_config_service.list_dismissals(db, organization_id, scope)


@router.delete("/dismissals/{organization_id}/{scope}/{insight_id}")
def restore_insight(organization_id: str, scope: str, insight_id: str, db: Session = Depends(get_db)):
    return insight_config_service.restore(db, organization_id, scope, insight_id)


@router.post("/{domain}", response_model=InsightListResponse, response_model_exclude_none=True)
def generate_insights(
    domain: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    organization_id: Optional[str] = Query(default=None),
    scope: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=0, le=100),
    db: Session = Depends(get_db),
):
    return insights_service.generate_for_domain(
        db,
        domain,
        payload,
        organization_id=organization_id,
        scope=scope,
        limit=limit,
    )
