from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

from ..types import Rule


class RuleSet:
    """Named, ordered list of rules. Rule sets compose with `+`."""

    def __init__(self, name: str, rules: Iterable[Rule] = ()):
        self.name = name
        self._rules: List[Rule] = list(rules)

    def register(self, fn: Rule) -> Rule:
        self._rules.append(fn)
        return fn

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(tuple(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __add__(self, other: "RuleSet") -> "RuleSet":
        return RuleSet(f"{self.name}+{other.name}", [*self._rules, *other._rules])

    def __repr__(self) -> str:
        return f"RuleSet({self.name!r}, {len(self._rules)} rules)"


CORE_RULES = RuleSet("core")
REAL_ESTATE_RULES = RuleSet("real_estate")
ADMIN_RULES = RuleSet("admin")


# Import modules so @register decorators run
from . import core         # noqa: E402,F401
from . import real_estate  # noqa: E402,F401
from . import admin        # noqa: E402,F401
