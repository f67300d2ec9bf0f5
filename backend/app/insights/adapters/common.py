"""
Shared helpers for domain adapters.

Adapters never raise on malformed records: numbers coerce to 0.0 and records
without a usable date are left out of the monthly series.
"""

from __future__ import annotations

import math
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ..types import CategoryPoint, MonthlyPoint


def field_of(record: Any, name: str, default: Any = None) -> Any:
    """Read `name` from a mapping or an attribute-style record."""
    if record is None:
        return default
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def to_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def effective_amount(record: Any) -> float:
    """Functional (comparison-currency) amount when the caller supplied one, else the raw amount."""
    functional = to_amount(field_of(record, "functional_amount"))
    return functional if functional else to_amount(field_of(record, "amount"))


def to_count(value: Any) -> int:
    return int(to_amount(value))


def to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
        if len(raw) >= 7:
            try:
                return date.fromisoformat(raw[:7] + "-01")
            except ValueError:
                return None
    return None


def month_key(value: Any) -> Optional[str]:
    d = to_date(value)
    return None if d is None else f"{d.year:04d}-{d.month:02d}"


def label_of(value: Any, fallback: str) -> str:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def group_monthly(pairs: Iterable[Tuple[Optional[str], float]]) -> List[MonthlyPoint]:
    """Sum (month, amount) pairs by month; ascending chronological order."""
    totals: dict = {}
    for month, amount in pairs:
        if month is None:
            continue
        totals[month] = totals.get(month, 0.0) + amount
    return [MonthlyPoint(period=month, value=totals[month]) for month in sorted(totals)]


def group_categories(pairs: Iterable[Tuple[str, float]]) -> List[CategoryPoint]:
    """Sum (label, amount) pairs by exact label, keeping first-seen order."""
    totals: "OrderedDict[str, float]" = OrderedDict()
    for name, amount in pairs:
        totals[name] = totals.get(name, 0.0) + amount
    return [CategoryPoint(name=name, value=value) for name, value in totals.items()]
