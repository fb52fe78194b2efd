"""Ratio and variance calculations.

Every function here is total: a zero or negative denominator resolves to a
fixed policy value instead of raising.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Optional

from glreports.domain.money import Number, round_money, to_decimal

# Achievement percentage reported when the comparison amount is zero.
ACHIEVEMENT_CAP = Decimal("999")

HUNDRED = Decimal("100")
DAYS_PER_YEAR = Decimal("365")
ZERO = Decimal("0")


def achievement(period: Number, comparison: Number, cap: Decimal = ACHIEVEMENT_CAP) -> Decimal:
    """Return period as a percentage of comparison.

    Both zero gives 0, a zero comparison gives the cap, and results above
    the cap are clamped to it. Negative results are kept.
    """
    period = to_decimal(period)
    comparison = to_decimal(comparison)
    if period == 0 and comparison == 0:
        return ZERO
    if comparison == 0:
        return cap
    result = period / comparison * HUNDRED
    if result > cap:
        return cap
    return result


def variance_percent(current: Number, prior: Number) -> Decimal:
    """Return the change from prior to current as a percentage of |prior|."""
    current = to_decimal(current)
    prior = to_decimal(prior)
    if prior == 0:
        return ZERO
    return (current - prior) / abs(prior) * HUNDRED


def margin_percent(amount: Number, revenue: Number) -> Decimal:
    """Return amount as a percentage of revenue, 0 when revenue is 0."""
    amount = to_decimal(amount)
    revenue = to_decimal(revenue)
    if revenue == 0:
        return ZERO
    return amount / revenue * HUNDRED


def _ratio(numerator: Decimal, denominator: Decimal, scale: Decimal = Decimal("1")) -> Decimal:
    if denominator <= 0:
        return ZERO
    return numerator / denominator * scale


@dataclass(frozen=True)
class WorkingCapitalFigures:
    """Balances and period flows that working-capital ratios are computed from."""

    current_assets: Decimal = ZERO
    current_liabilities: Decimal = ZERO
    cash: Decimal = ZERO
    marketable_securities: Decimal = ZERO
    accounts_receivable: Decimal = ZERO
    inventory: Decimal = ZERO
    accounts_payable: Decimal = ZERO
    revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    total_assets: Decimal = ZERO

    @property
    def working_capital(self) -> Decimal:
        return to_decimal(self.current_assets) - to_decimal(self.current_liabilities)


@dataclass(frozen=True)
class LiquidityRatios:
    current_ratio: Decimal
    quick_ratio: Decimal
    cash_ratio: Decimal


@dataclass(frozen=True)
class EfficiencyMetrics:
    days_sales_outstanding: Decimal
    days_inventory_outstanding: Decimal
    days_payable_outstanding: Decimal
    cash_conversion_cycle: Decimal
    working_capital_turnover: Decimal
    working_capital_ratio: Decimal
    days_working_capital: Decimal


@dataclass(frozen=True)
class WorkingCapitalAnalysis:
    working_capital: Decimal
    liquidity: LiquidityRatios
    efficiency: EfficiencyMetrics
    health_status: str
    figures: Optional[WorkingCapitalFigures] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "working_capital": float(self.working_capital),
            "liquidity": {name: float(value) for name, value in asdict(self.liquidity).items()},
            "efficiency": {name: float(value) for name, value in asdict(self.efficiency).items()},
            "health_status": self.health_status,
        }
        if self.figures is not None:
            data["figures"] = {
                name: float(value) for name, value in asdict(self.figures).items()
            }
        return data


def liquidity_ratios(figures: WorkingCapitalFigures) -> LiquidityRatios:
    """Compute current, quick and cash ratios."""
    liabilities = to_decimal(figures.current_liabilities)
    assets = to_decimal(figures.current_assets)
    return LiquidityRatios(
        current_ratio=_ratio(assets, liabilities),
        quick_ratio=_ratio(assets - to_decimal(figures.inventory), liabilities),
        cash_ratio=_ratio(
            to_decimal(figures.cash) + to_decimal(figures.marketable_securities),
            liabilities,
        ),
    )


def efficiency_metrics(figures: WorkingCapitalFigures) -> EfficiencyMetrics:
    """Compute days-outstanding metrics and the cash conversion cycle."""
    revenue = to_decimal(figures.revenue)
    cogs = to_decimal(figures.cost_of_goods_sold)
    working_capital = figures.working_capital

    dso = _ratio(to_decimal(figures.accounts_receivable), revenue, DAYS_PER_YEAR)
    dio = _ratio(to_decimal(figures.inventory), cogs, DAYS_PER_YEAR)
    dpo = _ratio(to_decimal(figures.accounts_payable), cogs, DAYS_PER_YEAR)

    return EfficiencyMetrics(
        days_sales_outstanding=dso,
        days_inventory_outstanding=dio,
        days_payable_outstanding=dpo,
        cash_conversion_cycle=dso + dio - dpo,
        working_capital_turnover=_ratio(revenue, working_capital),
        working_capital_ratio=_ratio(working_capital, to_decimal(figures.total_assets)),
        days_working_capital=_ratio(working_capital, revenue, DAYS_PER_YEAR),
    )


def health_status(current_ratio: Number) -> str:
    """Classify liquidity by current ratio."""
    current_ratio = to_decimal(current_ratio)
    if current_ratio >= Decimal("1.5"):
        return "Healthy"
    if current_ratio >= Decimal("1.0"):
        return "Caution"
    return "Critical"


def analyze_working_capital(figures: WorkingCapitalFigures) -> WorkingCapitalAnalysis:
    """Compute all working-capital ratios, rounded to two places."""
    liquidity = liquidity_ratios(figures)
    efficiency = efficiency_metrics(figures)
    return WorkingCapitalAnalysis(
        working_capital=round_money(figures.working_capital),
        liquidity=LiquidityRatios(
            current_ratio=round_money(liquidity.current_ratio),
            quick_ratio=round_money(liquidity.quick_ratio),
            cash_ratio=round_money(liquidity.cash_ratio),
        ),
        efficiency=EfficiencyMetrics(
            days_sales_outstanding=round_money(efficiency.days_sales_outstanding),
            days_inventory_outstanding=round_money(efficiency.days_inventory_outstanding),
            days_payable_outstanding=round_money(efficiency.days_payable_outstanding),
            cash_conversion_cycle=round_money(efficiency.cash_conversion_cycle),
            working_capital_turnover=round_money(efficiency.working_capital_turnover),
            working_capital_ratio=round_money(efficiency.working_capital_ratio),
            days_working_capital=round_money(efficiency.days_working_capital),
        ),
        health_status=health_status(liquidity.current_ratio),
        figures=figures,
    )
