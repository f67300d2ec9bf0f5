from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.insights.rules.core import (  # noqa: E402
    concentration_narrative_insight,
    growth_explained_insight,
    sustained_trend_insight,
    year_end_projection_insight,
)
from backend.app.insights.types import (  # noqa: E402
    EXPENSE_TERMS,
    INCOME_TERMS,
    CategoryPoint,
    InsightContext,
    MonthlyPoint,
    Polarity,
    TermLabels,
    Thresholds,
    infer_polarity,
)


def _cats(**values):
    return tuple(CategoryPoint(name=name, value=value) for name, value in values.items())


def _months(*values):
    return tuple(MonthlyPoint(period=f"2024-{i + 1:02d}", value=v) for i, v in enumerate(values))


# ----------------------------
# growth-explained
# ----------------------------

def test_growth_exactly_at_threshold_does_not_trigger():
    ctx = InsightContext(category_data=_cats(A=115), previous_category_data=_cats(A=100), total_value=115)

    assert growth_explained_insight(ctx) is None


def test_growth_just_over_threshold_triggers():
    ctx = InsightContext(category_data=_cats(A=115.01), previous_category_data=_cats(A=100), total_value=115.01)

    insight = growth_explained_insight(ctx)

    assert insight.id == "growth-explained-increase"
    assert insight.severity == "warning"
    assert insight.priority == 1
    assert insight.icon == "TrendingUp"
    assert 'El 100% del aumento proviene de "A"' in insight.description
    assert insight.actions[0].type == "navigate"
    assert insight.actions[0].payload == {"tab": "concepts", "filterCategory": "A"}


def test_growth_decrease_names_most_negative_driver():
    ctx = InsightContext(
        category_data=_cats(A=100, B=50),
        previous_category_data=_cats(A=100, B=100),
        total_value=150,
    )

    insight = growth_explained_insight(ctx)

    assert insight.id == "growth-explained-decrease"
    assert insight.severity == "info"
    assert insight.priority == 3
    assert '"B"' in insight.description
    assert "disminuye un 25%" in insight.context


def test_growth_tied_drivers_keep_the_first_category():
    ctx = InsightContext(
        category_data=_cats(A=150, B=150),
        previous_category_data=_cats(A=100, B=100),
        total_value=300,
    )

    insight = growth_explained_insight(ctx)

    assert insight.id == "growth-explained-increase"
    assert 'El 50% del aumento proviene de "A"' in insight.description
    assert insight.actions[0].payload["filterCategory"] == "A"


def test_growth_new_category_counts_previous_as_zero():
    ctx = InsightContext(
        category_data=_cats(A=100, B=50),
        previous_category_data=_cats(A=100),
        total_value=150,
    )

    insight = growth_explained_insight(ctx)

    assert insight.actions[0].payload["filterCategory"] == "B"


def test_growth_spread_evenly_has_no_dominant_driver():
    ctx = InsightContext(
        category_data=_cats(A=120, B=120, C=120, D=120, E=120),
        previous_category_data=_cats(A=100, B=100, C=100, D=100, E=100),
        total_value=600,
    )

    assert growth_explained_insight(ctx) is None


def test_growth_needs_previous_period_and_total():
    assert growth_explained_insight(InsightContext(category_data=_cats(A=200), total_value=200)) is None
    assert growth_explained_insight(
        InsightContext(category_data=_cats(A=200), previous_category_data=_cats(A=100), total_value=0)
    ) is None
    assert growth_explained_insight(
        InsightContext(category_data=_cats(A=200), previous_category_data=_cats(A=0), total_value=200)
    ) is None


def test_growth_threshold_is_configurable():
    ctx = InsightContext(
        category_data=_cats(A=120),
        previous_category_data=_cats(A=100),
        total_value=120,
        thresholds=Thresholds(growth_significant=25),
    )

    assert growth_explained_insight(ctx) is None


# ----------------------------
# concentration
# ----------------------------

def test_single_category_concentration_is_critical():
    insight = concentration_narrative_insight(InsightContext(category_data=_cats(A=80, B=20)))

    assert insight.id == "concentration-single"
    assert insight.severity == "critical"
    assert insight.priority == 1
    assert "80%" in insight.description
    assert insight.actions[0].payload == {"category": "A"}


def test_few_categories_concentration_is_warning():
    insight = concentration_narrative_insight(InsightContext(category_data=_cats(B=35, A=50, C=15)))

    assert insight.id == "concentration-few"
    assert insight.severity == "warning"
    assert insight.priority == 2
    assert "2 categorías concentran el 85%" in insight.description
    assert '"A" lidera con el 50%' in insight.context


def test_spread_out_categories_do_not_trigger():
    assert concentration_narrative_insight(InsightContext(category_data=_cats(A=25, B=25, C=25, D=25))) is None
    assert concentration_narrative_insight(InsightContext(category_data=_cats(A=100))) is None
    assert concentration_narrative_insight(InsightContext(category_data=_cats(A=0, B=0))) is None


def test_concentration_threshold_is_configurable():
    ctx = InsightContext(category_data=_cats(A=80, B=20), thresholds=Thresholds(concentration_pareto=90))

    insight = concentration_narrative_insight(ctx)

    assert insight.id == "concentration-few"


# ----------------------------
# sustained trend / projection
# ----------------------------

RISING = _months(100, 120, 144, 172.8)
FALLING = _months(172.8, 144, 120, 100)


def test_rising_expenses_warn():
    insight = sustained_trend_insight(InsightContext(monthly_data=RISING, term_labels=EXPENSE_TERMS))

    assert insight.id == "sustained-trend-up"
    assert insight.severity == "warning"
    assert insight.priority == 2
    assert "~20% mensual" in insight.description
    assert insight.actions[0].payload == {"panel": "monthlyChart"}


def test_falling_expenses_are_informational():
    insight = sustained_trend_insight(InsightContext(monthly_data=FALLING, term_labels=EXPENSE_TERMS))

    assert insight.id == "sustained-trend-down"
    assert insight.severity == "info"


def test_income_polarity_flips_severity():
    up = sustained_trend_insight(InsightContext(monthly_data=RISING, term_labels=INCOME_TERMS))
    down = sustained_trend_insight(
        InsightContext(monthly_data=FALLING, term_labels=EXPENSE_TERMS, polarity=Polarity.INCREASE_IS_GOOD)
    )

    assert up.severity == "positive"
    assert down.severity == "warning"


def test_trend_skips_short_periods_and_thin_series():
    assert sustained_trend_insight(InsightContext(monthly_data=RISING, is_short_period=True)) is None
    assert sustained_trend_insight(InsightContext(monthly_data=_months(100, 120))) is None
    assert sustained_trend_insight(InsightContext(monthly_data=_months(100, 101, 102, 103))) is None


def test_year_end_projection_in_march():
    ctx = InsightContext(monthly_data=_months(100, 200, 300), current_month=3, term_labels=EXPENSE_TERMS)

    insight = year_end_projection_insight(ctx)

    assert insight.id == "year-end-projection-up"
    assert insight.severity == "warning"
    assert insight.priority == 3
    assert insight.icon == "Calendar"
    assert "quedan 9 meses" in insight.context


def test_year_end_projection_stops_in_november():
    ctx = InsightContext(monthly_data=_months(100, 200, 300), current_month=11)

    assert year_end_projection_insight(ctx) is None
    assert year_end_projection_insight(
        InsightContext(monthly_data=_months(100, 200, 300), current_month=10)
    ) is not None


def test_polarity_inference_from_labels():
    assert infer_polarity(INCOME_TERMS) == Polarity.INCREASE_IS_GOOD
    assert infer_polarity(TermLabels(singular="Ingreso")) == Polarity.INCREASE_IS_GOOD
    assert infer_polarity(EXPENSE_TERMS) == Polarity.INCREASE_IS_BAD
    assert InsightContext(term_labels=INCOME_TERMS, polarity=Polarity.INCREASE_IS_BAD).effective_polarity == (
        Polarity.INCREASE_IS_BAD
    )
