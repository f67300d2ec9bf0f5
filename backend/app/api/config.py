from __future__ import annotations

import os
from typing import Optional


def custom_thresholds_enabled() -> bool:
    return os.getenv("INSIGHTS_CUSTOM_THRESHOLDS") == "1"


def insights_max_results() -> Optional[int]:
    raw = os.getenv("INSIGHTS_MAX_RESULTS")
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError("INSIGHTS_MAX_RESULTS must be an integer.") from exc
    return value if value > 0 else None
