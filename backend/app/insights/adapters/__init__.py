from .admin import build_admin_input, generate_admin_insights
from .clients import build_client_context, build_client_summaries, generate_client_insights
from .finance import build_finance_ledger, generate_finance_insights
from .general_costs import build_general_costs_context, generate_general_costs_insights
from .materials import build_material_context, generate_material_insights
from .real_estate import build_real_estate_context, generate_real_estate_insights

__all__ = [
    "build_admin_input",
    "build_client_context",
    "build_client_summaries",
    "build_finance_ledger",
    "build_general_costs_context",
    "build_material_context",
    "build_real_estate_context",
    "generate_admin_insights",
    "generate_client_insights",
    "generate_finance_insights",
    "generate_general_costs_insights",
    "generate_material_insights",
    "generate_real_estate_insights",
]
