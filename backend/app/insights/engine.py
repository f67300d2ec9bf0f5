from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .types import Insight, Rule

logger = logging.getLogger(__name__)


def _rule_name(rule: Rule) -> str:
    name = getattr(rule, "__name__", None) or getattr(getattr(rule, "func", None), "__name__", None)
    return name or repr(rule)


def _accepted(insight: Any, source: str) -> bool:
    """True when `insight` is an Insight whose priority ranks; otherwise logged and dropped."""
    if not isinstance(insight, Insight):
        logger.warning("Insight rule %s returned %s, not an Insight; skipping", source, type(insight).__name__)
        return False
    try:
        return isinstance(insight.rank, int)
    except (TypeError, ValueError):
        logger.warning("Insight rule %s returned an unrankable priority; skipping", source, exc_info=True)
        return False


def evaluate(rules: Iterable[Rule], context: Any, *, limit: Optional[int] = None) -> List[Insight]:
    """
    Run every rule against one context.

    - A rule returning None contributes nothing.
    - A rule that raises, or returns something that is not a rankable Insight,
      is logged and skipped; the rest of the batch still runs.
    - Results are stable-sorted by priority (missing priority ranks as 99).
    - `limit` truncates after sorting; None keeps everything.
    """
    insights: List[Insight] = []

    for rule in rules:
        try:
            insight = rule(context)
        except Exception:
            logger.warning("Insight rule %s failed; skipping", _rule_name(rule), exc_info=True)
            continue
        if insight is not None and _accepted(insight, _rule_name(rule)):
            insights.append(insight)

    ranked = sorted(insights, key=lambda i: i.rank)
    if limit is not None:
        return ranked[: max(0, int(limit))]
    return ranked


def merge_ranked(*groups: Iterable[Insight], limit: Optional[int] = None) -> List[Insight]:
    """Combine already-built insight lists (e.g. adapter-local + rule output) into one ranking."""
    combined = [
        insight
        for group in groups
        for insight in group
        if insight is not None and _accepted(insight, "merge_ranked")
    ]
    ranked = sorted(combined, key=lambda i: i.rank)
    if limit is not None:
        return ranked[: max(0, int(limit))]
    return ranked
