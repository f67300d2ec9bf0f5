"""
Finance adapter.

Organization-wide cash flow: every movement carries `amount_sign`
(1 = income, anything else = expense) and an optional wallet and movement
type. Produces the cash-flow checks below plus the core rules run over the
net monthly flow.

Checks (all on one FinanceLedger):
- high-expense-ratio / negative-balance: income vs. expenses
- negative-wallet / wallet-concentration / inactive-wallet: wallet balances
- no-recent-income / expense-spike: recent activity
- top-expense-type / income-concentration: movement type mix
- negative-cashflow-trend: recent months with negative net flow
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..engine import evaluate, merge_ranked
from ..rules import CORE_RULES, RuleSet
from ..text import format_money, plural, round_half_up
from ..types import CategoryPoint, Insight, InsightContext, MonthlyPoint, Polarity, TermLabels, Thresholds
from .common import effective_amount, field_of, label_of, month_key, to_amount, to_date

DEFAULT_LIMIT = 5
NO_WALLET = "Sin billetera"

HIGH_EXPENSE_RATIO_PCT = 90
WALLET_CONCENTRATION_PCT = 85
INACTIVE_WALLET_DAYS = 30
INACTIVE_WALLET_MIN_BALANCE = 1000
NO_INCOME_WINDOW_DAYS = 15
EXPENSE_SPIKE_FACTOR = 1.5
TOP_EXPENSE_TYPE_PCT = 50
INCOME_CONCENTRATION_PCT = 70

FLOW_TERMS = TermLabels(singular="flujo", plural="movimientos")

MOVEMENT_TYPE_LABELS: Dict[str, str] = {
    "client_payment": "Pagos de Clientes",
    "material_payment": "Materiales",
    "personnel_payment": "Personal",
    "partner_contribution": "Aportes de Socios",
    "partner_withdrawal": "Retiros de Socios",
    "general_cost_payment": "Gastos Generales",
    "equipment_rental": "Alquiler de Equipos",
    "wallet_transfer": "Transferencias",
    "currency_exchange": "Cambios de Moneda",
}

FINANCE_RULES = RuleSet("finance")


def movement_type_label(movement_type: Optional[str]) -> str:
    if not movement_type:
        return "Otros"
    return MOVEMENT_TYPE_LABELS.get(movement_type, movement_type)


@dataclass(frozen=True)
class FinanceLedger:
    """Aggregates the finance checks read; built once per request."""
    as_of: date
    total_income: float = 0.0
    total_expense: float = 0.0
    wallet_balances: Mapping[str, float] = field(default_factory=dict)
    wallet_last_activity: Mapping[str, date] = field(default_factory=dict)
    has_income: bool = False
    has_recent_income: bool = False
    monthly_expense: Tuple[MonthlyPoint, ...] = ()
    monthly_net: Tuple[MonthlyPoint, ...] = ()
    expense_by_type: Tuple[CategoryPoint, ...] = ()
    income_by_type: Tuple[CategoryPoint, ...] = ()
    movement_count: int = 0
    format_money: Callable[[float], str] = format_money

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense

    @property
    def expense_ratio(self) -> float:
        return self.total_expense / self.total_income * 100.0 if self.total_income > 0 else 0.0


def _ranked(totals: Mapping[str, float]) -> Tuple[CategoryPoint, ...]:
    ordered = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return tuple(CategoryPoint(name=name, value=value) for name, value in ordered)


def build_finance_ledger(
    movements: Optional[Iterable[Any]],
    wallets: Optional[Iterable[Any]] = None,
    *,
    as_of: Optional[date] = None,
    format_money: Callable[[float], str] = format_money,
) -> FinanceLedger:
    as_of = as_of or date.today()
    wallet_names = {
        str(field_of(w, "id")): label_of(field_of(w, "wallet_name"), NO_WALLET)
        for w in (wallets or ())
        if field_of(w, "id") is not None
    }
    recent_cutoff = as_of - timedelta(days=NO_INCOME_WINDOW_DAYS)

    total_income = 0.0
    total_expense = 0.0
    balances: Dict[str, float] = {}
    last_activity: Dict[str, date] = {}
    monthly_income: Dict[str, float] = {}
    monthly_expense: Dict[str, float] = {}
    expense_by_type: Dict[str, float] = {}
    income_by_type: Dict[str, float] = {}
    has_income = False
    has_recent_income = False
    count = 0

    for m in movements or ():
        count += 1
        amount = abs(effective_amount(m))
        is_income = to_amount(field_of(m, "amount_sign")) == 1
        wallet_id = field_of(m, "wallet_id")
        wallet = wallet_names.get(str(wallet_id), NO_WALLET) if wallet_id else NO_WALLET
        type_label = movement_type_label(field_of(m, "movement_type"))
        paid_on = to_date(field_of(m, "payment_date"))
        month = month_key(paid_on)

        balances[wallet] = balances.get(wallet, 0.0) + (amount if is_income else -amount)
        if paid_on is not None and (wallet not in last_activity or paid_on > last_activity[wallet]):
            last_activity[wallet] = paid_on

        if is_income:
            total_income += amount
            has_income = True
            if paid_on is not None and paid_on >= recent_cutoff:
                has_recent_income = True
            income_by_type[type_label] = income_by_type.get(type_label, 0.0) + amount
            if month is not None:
                monthly_income[month] = monthly_income.get(month, 0.0) + amount
        else:
            total_expense += amount
            expense_by_type[type_label] = expense_by_type.get(type_label, 0.0) + amount
            if month is not None:
                monthly_expense[month] = monthly_expense.get(month, 0.0) + amount

    months = sorted(set(monthly_income) | set(monthly_expense))
    monthly_net = []
    for month in months:
        net = monthly_income.get(month, 0.0) - monthly_expense.get(month, 0.0)
        monthly_net.append(MonthlyPoint(period=month, value=net, balance=net))

    return FinanceLedger(
        as_of=as_of,
        total_income=total_income,
        total_expense=total_expense,
        wallet_balances=balances,
        wallet_last_activity=last_activity,
        has_income=has_income,
        has_recent_income=has_recent_income,
        monthly_expense=tuple(MonthlyPoint(period=k, value=monthly_expense[k]) for k in sorted(monthly_expense)),
        monthly_net=tuple(monthly_net),
        expense_by_type=_ranked(expense_by_type),
        income_by_type=_ranked(income_by_type),
        movement_count=count,
        format_money=format_money,
    )


# ----------------------------
# Cash flow
# ----------------------------

@FINANCE_RULES.register
def high_expense_ratio_insight(ledger: FinanceLedger) -> Optional[Insight]:
    ratio = ledger.expense_ratio
    if ledger.total_income <= 0 or ratio <= HIGH_EXPENSE_RATIO_PCT:
        return None

    money = ledger.format_money
    return Insight(
        id="high-expense-ratio",
        severity="critical" if ratio > 100 else "warning",
        title="Margen ajustado",
        description=f"Los egresos representan el {round_half_up(ratio)}% de los ingresos. El margen es muy bajo.",
        icon="AlertTriangle",
        priority=1,
        context=f"Ingresos: {money(ledger.total_income)} | Egresos: {money(ledger.total_expense)}",
        action_hint="Revisá los egresos para identificar oportunidades de optimización.",
    )


@FINANCE_RULES.register
def negative_balance_insight(ledger: FinanceLedger) -> Optional[Insight]:
    if ledger.balance >= 0:
        return None

    return Insight(
        id="negative-balance",
        severity="critical",
        title="Balance negativo",
        description=f"Los egresos superan a los ingresos por {ledger.format_money(abs(ledger.balance))}.",
        icon="TrendingDown",
        priority=1,
        context="Se ha gastado más de lo que ha ingresado en el período.",
        action_hint="Priorizá cobros pendientes o reducí gastos.",
    )


# ----------------------------
# Wallets
# ----------------------------

@FINANCE_RULES.register
def negative_wallet_insight(ledger: FinanceLedger) -> Optional[Insight]:
    negative = [(name, value) for name, value in ledger.wallet_balances.items() if value < 0]
    if not negative:
        return None

    name, value = min(negative, key=lambda kv: kv[1])
    return Insight(
        id="negative-wallet",
        severity="critical",
        title=f"Billetera en rojo: {name}",
        description=f"Esta cuenta tiene un saldo negativo de {ledger.format_money(abs(value))}.",
        icon="Wallet",
        priority=1,
        action_hint="Transferí fondos a esta cuenta o revisá los movimientos.",
    )


@FINANCE_RULES.register
def wallet_concentration_insight(ledger: FinanceLedger) -> Optional[Insight]:
    if len(ledger.wallet_balances) < 2:
        return None
    positive = [(name, value) for name, value in ledger.wallet_balances.items() if value > 0]
    funds = sum(value for _, value in positive)
    if not positive or funds <= 0:
        return None

    name, value = max(positive, key=lambda kv: kv[1])
    share = value / funds * 100.0
    if share <= WALLET_CONCENTRATION_PCT:
        return None

    money = ledger.format_money
    return Insight(
        id="wallet-concentration",
        severity="warning",
        title="Alta concentración de fondos",
        description=f'El {round_half_up(share)}% de tus fondos están en "{name}".',
        icon="PieChart",
        priority=3,
        context=f"{money(value)} de {money(funds)} totales.",
        action_hint="Considerá diversificar entre cuentas para reducir riesgos.",
    )


@FINANCE_RULES.register
def inactive_wallet_insight(ledger: FinanceLedger) -> Optional[Insight]:
    cutoff = ledger.as_of - timedelta(days=INACTIVE_WALLET_DAYS)
    inactive = [
        name for name, last in ledger.wallet_last_activity.items()
        if last < cutoff and ledger.wallet_balances.get(name, 0.0) > INACTIVE_WALLET_MIN_BALANCE
    ]
    if not inactive:
        return None

    count = len(inactive)
    more = f" y {count - 1} más" if count > 1 else ""
    return Insight(
        id="inactive-wallet",
        severity="info",
        title=f"{count} {plural(count, 'billetera sin actividad', 'billeteras sin actividad')}",
        description=(
            f'"{inactive[0]}"{more} no {plural(count, "tiene", "tienen")} movimientos '
            f"hace más de {INACTIVE_WALLET_DAYS} días."
        ),
        icon="Clock",
        priority=4,
        action_hint="Verificá si hay fondos que podrían utilizarse.",
    )


# ----------------------------
# Activity
# ----------------------------

@FINANCE_RULES.register
def no_recent_income_insight(ledger: FinanceLedger) -> Optional[Insight]:
    if not ledger.has_income or ledger.has_recent_income:
        return None

    return Insight(
        id="no-recent-income",
        severity="warning",
        title=f"Sin ingresos en {NO_INCOME_WINDOW_DAYS} días",
        description="No se han registrado cobros o aportes recientemente.",
        icon="AlertCircle",
        priority=2,
        action_hint="Hacé seguimiento a los clientes con pagos pendientes.",
    )


@FINANCE_RULES.register
def expense_spike_insight(ledger: FinanceLedger) -> Optional[Insight]:
    months = list(ledger.monthly_expense)
    if len(months) < 3:
        return None

    last = months[-1]
    previous = months[-4:-1]
    average = sum(m.value for m in previous) / len(previous)
    if average <= 0 or last.value <= average * EXPENSE_SPIKE_FACTOR:
        return None

    increase = round_half_up((last.value - average) / average * 100.0)
    money = ledger.format_money
    return Insight(
        id="expense-spike",
        severity="warning",
        title="Pico de egresos detectado",
        description=f"Los egresos del último mes son {increase}% mayores al promedio de los meses anteriores.",
        icon="TrendingUp",
        priority=2,
        context=f"Último mes: {money(last.value)} | Promedio: {money(average)}",
        action_hint="Revisá qué gastos fueron extraordinarios.",
    )


# ----------------------------
# Movement types
# ----------------------------

@FINANCE_RULES.register
def top_expense_type_insight(ledger: FinanceLedger) -> Optional[Insight]:
    if not ledger.expense_by_type or ledger.total_expense <= 0:
        return None

    top = ledger.expense_by_type[0]
    share = round_half_up(top.value / ledger.total_expense * 100.0)
    if share <= TOP_EXPENSE_TYPE_PCT:
        return None

    money = ledger.format_money
    return Insight(
        id="top-expense-type",
        severity="info",
        title=f"Principal egreso: {top.name}",
        description=f'El {share}% de los egresos corresponde a "{top.name}".',
        icon="BarChart3",
        priority=4,
        context=f"{money(top.value)} de {money(ledger.total_expense)} en egresos.",
        action_hint="Este es tu mayor centro de costos.",
    )


@FINANCE_RULES.register
def income_concentration_insight(ledger: FinanceLedger) -> Optional[Insight]:
    if len(ledger.income_by_type) < 2 or ledger.total_income <= 0:
        return None

    top = ledger.income_by_type[0]
    share = round_half_up(top.value / ledger.total_income * 100.0)
    if share <= INCOME_CONCENTRATION_PCT:
        return None

    return Insight(
        id="income-concentration",
        severity="warning" if share > 90 else "info",
        title="Concentración de ingresos",
        description=f'El {share}% de los ingresos proviene de "{top.name}".',
        icon="Target",
        priority=3,
        context="Diversificar fuentes de ingreso reduce riesgos.",
    )


@FINANCE_RULES.register
def negative_cashflow_trend_insight(ledger: FinanceLedger) -> Optional[Insight]:
    months = list(ledger.monthly_net)
    if len(months) < 3:
        return None

    negative = sum(1 for m in months[-3:] if m.value < 0)
    if negative < 2:
        return None

    return Insight(
        id="negative-cashflow-trend",
        severity="critical",
        title="Flujo de caja negativo recurrente",
        description=f"{negative} de los últimos 3 meses tuvieron más egresos que ingresos.",
        icon="TrendingDown",
        priority=1,
        action_hint="Esto puede indicar un problema de liquidez sostenido.",
    )


def build_finance_context(
    ledger: FinanceLedger,
    *,
    thresholds: Optional[Thresholds] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
) -> InsightContext:
    return InsightContext(
        monthly_data=ledger.monthly_net,
        category_data=ledger.expense_by_type,
        total_value=ledger.total_income,
        payment_count=ledger.movement_count,
        month_count=len(ledger.monthly_net),
        current_month=ledger.as_of.month if current_month is None else current_month,
        is_short_period=is_short_period,
        thresholds=thresholds or Thresholds(),
        term_labels=FLOW_TERMS,
        polarity=Polarity.INCREASE_IS_GOOD,
    )


def generate_finance_insights(
    movements: Optional[Iterable[Any]],
    wallets: Optional[Iterable[Any]] = None,
    *,
    thresholds: Optional[Thresholds] = None,
    as_of: Optional[date] = None,
    current_month: Optional[int] = None,
    is_short_period: bool = False,
    format_money: Callable[[float], str] = format_money,
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[Insight]:
    rows = list(movements or ())
    if not rows:
        return []

    ledger = build_finance_ledger(rows, wallets, as_of=as_of, format_money=format_money)
    context = build_finance_context(
        ledger,
        thresholds=thresholds,
        current_month=current_month,
        is_short_period=is_short_period,
    )
    # Cash-flow checks rank ahead of core rules at equal priority.
    return merge_ranked(
        evaluate(FINANCE_RULES, ledger),
        evaluate(CORE_RULES, context),
        limit=limit,
    )
