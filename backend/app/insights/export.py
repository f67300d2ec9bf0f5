from __future__ import annotations

from typing import Any, Dict, Iterable, List

from backend.app.domain.contracts import InsightResult

from .types import Insight


def insight_to_dict(insight: Insight) -> Dict[str, Any]:
    """camelCase keys, as the dashboard consumes them; unset optionals are omitted."""
    out: Dict[str, Any] = {
        "id": insight.id,
        "title": insight.title,
        "description": insight.description,
        "severity": insight.severity,
    }
    if insight.icon is not None:
        out["icon"] = insight.icon
    if insight.priority is not None:
        out["priority"] = insight.priority
    if insight.context is not None:
        out["context"] = insight.context
    if insight.action_hint is not None:
        out["actionHint"] = insight.action_hint
    if insight.actions:
        out["actions"] = [
            {"id": a.id, "label": a.label, "type": a.type, "payload": dict(a.payload)}
            for a in insight.actions
        ]
    return out


def insights_as_dicts(insights: Iterable[Insight]) -> List[Dict[str, Any]]:
    return [insight_to_dict(insight) for insight in insights]


def insight_to_contract(insight: Insight) -> InsightResult:
    return InsightResult.model_validate(insight_to_dict(insight))
