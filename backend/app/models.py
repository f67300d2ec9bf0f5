from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# Insight settings
# -------------------------

class OrganizationInsightConfig(Base):
    """Per-organization threshold overrides (only the keys the org changed)."""
    __tablename__ = "insight_configs"

    organization_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    thresholds: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow
    )


class InsightDismissal(Base):
    """An insight id hidden for one organization on one screen (scope)."""
    __tablename__ = "insight_dismissals"

    organization_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    scope: Mapped[str] = mapped_column(String(64), primary_key=True)
    insight_id: Mapped[str] = mapped_column(String(120), primary_key=True)
    dismissed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
