from .adapters import (
    generate_admin_insights,
    generate_client_insights,
    generate_finance_insights,
    generate_general_costs_insights,
    generate_material_insights,
    generate_real_estate_insights,
)
from .engine import evaluate, merge_ranked
from .export import insight_to_contract, insight_to_dict, insights_as_dicts
from .rules import ADMIN_RULES, CORE_RULES, REAL_ESTATE_RULES, RuleSet
from .types import Insight, InsightAction, InsightContext, Polarity, TermLabels, Thresholds

__all__ = [
    "ADMIN_RULES",
    "CORE_RULES",
    "REAL_ESTATE_RULES",
    "Insight",
    "InsightAction",
    "InsightContext",
    "Polarity",
    "RuleSet",
    "TermLabels",
    "Thresholds",
    "evaluate",
    "generate_admin_insights",
    "generate_client_insights",
    "generate_finance_insights",
    "generate_general_costs_insights",
    "generate_material_insights",
    "generate_real_estate_insights",
    "insight_to_contract",
    "insight_to_dict",
    "insights_as_dicts",
    "merge_ranked",
]
