from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives (narratives never use banker's rounding)."""
    return int(math.floor(value + 0.5))


def format_money(amount: float) -> str:
    return f"${amount:,.2f}"


def plural(count: int, singular: str, plural_form: str) -> str:
    return singular if count == 1 else plural_form
