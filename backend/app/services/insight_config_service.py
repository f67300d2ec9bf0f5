from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.api.config import custom_thresholds_enabled
from backend.app.insights.types import THRESHOLD_DEFAULTS, Thresholds
from backend.app.models import InsightDismissal, OrganizationInsightConfig


logger = logging.getLogger(__name__)


def _overrides(row: Optional[OrganizationInsightConfig]) -> Dict[str, float]:
    if row is None or not row.thresholds:
        return {}
    parsed = Thresholds.from_mapping(row.thresholds)
    return {key: getattr(parsed, key) for key in THRESHOLD_DEFAULTS if getattr(parsed, key) is not None}


def load_thresholds(db: Session, organization_id: str) -> Thresholds:
    """Stored overrides for the organization; defaults fill the rest at rule time."""
    row = db.get(OrganizationInsightConfig, organization_id)
    return Thresholds(**_overrides(row))


def get_config(db: Session, organization_id: str) -> Dict[str, Any]:
    row = db.get(OrganizationInsightConfig, organization_id)
    overrides = _overrides(row)
    return {
        "organization_id": organization_id,
        "thresholds": Thresholds(**overrides).as_dict(),
        "overrides": overrides,
        "custom_thresholds_enabled": custom_thresholds_enabled(),
        "updated_at": row.updated_at if row else None,
    }


def update_config(db: Session, organization_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    if not custom_thresholds_enabled():
        raise HTTPException(status_code=403, detail="custom insight thresholds are not enabled")

    unknown = sorted(set(changes) - set(THRESHOLD_DEFAULTS))
    if unknown:
        raise HTTPException(status_code=400, detail=f"unknown threshold keys: {', '.join(unknown)}")

    row = db.get(OrganizationInsightConfig, organization_id)
    merged = _overrides(row)
    for key, value in changes.items():
        if value is None:
            continue
        merged[key] = value

    if row is None:
        row = OrganizationInsightConfig(organization_id=organization_id, thresholds=merged)
        db.add(row)
    else:
        # Reassign so the JSON column is flagged dirty.
        row.thresholds = dict(merged)
    db.commit()
    db.refresh(row)

    logger.info("insight thresholds updated org=%s keys=%s", organization_id, sorted(changes))
    return get_config(db, organization_id)


# -------------------------
# Dismissals
# -------------------------

def dismissed_ids(db: Session, organization_id: str, scope: str) -> set[str]:
    rows = db.execute(
        select(InsightDismissal.insight_id).where(
            InsightDismissal.organization_id == organization_id,
            InsightDismissal.scope == scope,
        )
    ).scalars()
    return set(rows)


def _dismissal_dict(row: InsightDismissal) -> Dict[str, Any]:
    return {
        "organization_id": row.organization_id,
        "scope": row.scope,
        "insight_id": row.insight_id,
        "dismissed_at": row.dismissed_at,
    }


def dismiss(db: Session, organization_id: str, scope: str, insight_id: str) -> Dict[str, Any]:
    row = db.get(InsightDismissal, (organization_id, scope, insight_id))
    if row is None:
        row = InsightDismissal(organization_id=organization_id, scope=scope, insight_id=insight_id)
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info("insight dismissed org=%s scope=%s insight=%s", organization_id, scope, insight_id)
    return _dismissal_dict(row)


def list_dismissals(db: Session, organization_id: str, scope: Optional[str] = None) -> List[Dict[str, Any]]:
    stmt = select(InsightDismissal).where(InsightDismissal.organization_id == organization_id)
    if scope is not None:
        stmt = stmt.where(InsightDismissal.scope == scope)
    stmt = stmt.order_by(InsightDismissal.scope, InsightDismissal.insight_id)
    return [_dismissal_dict(row) for row in db.execute(stmt).scalars()]


def restore(db: Session, organization_id: str, scope: str, insight_id: str) -> Dict[str, Any]:
    row = db.get(InsightDismissal, (organization_id, scope, insight_id))
    if row is None:
        raise HTTPException(status_code=404, detail="dismissal not found")
    db.delete(row)
    db.commit()
    logger.info("insight restored org=%s scope=%s insight=%s", organization_id, scope, insight_id)
    return {"organization_id": organization_id, "scope": scope, "insight_id": insight_id, "restored": True}
