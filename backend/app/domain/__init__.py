"""Domain contracts and shared types."""

from backend.app.domain.contracts import (  # noqa: F401
    AdminInsightsRequest,
    ClientInsightsRequest,
    FinanceInsightsRequest,
    GeneralCostsInsightsRequest,
    InsightActionContract,
    InsightConfigOut,
    InsightDismissalIn,
    InsightDismissalOut,
    InsightListMeta,
    InsightListResponse,
    InsightResult,
    InsightThresholdsContract,
    MaterialInsightsRequest,
    RealEstateInsightsRequest,
)
