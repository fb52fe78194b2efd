"""Tests for ratio and variance calculations."""

from decimal import Decimal

from glreports.domain.ratios import (
    WorkingCapitalFigures,
    achievement,
    analyze_working_capital,
    health_status,
    margin_percent,
    variance_percent,
)


def test_achievement_sentinels():
    assert achievement(50, 0) == Decimal("999")
    assert achievement(0, 0) == Decimal("0")
    assert achievement(-50, 100) == Decimal("-50")


def test_achievement_caps_high_side_only():
    assert achievement(5000, 100) == Decimal("999")
    assert achievement(-5000, 100) == Decimal("-5000")
    assert achievement(75, 100) == Decimal("75")


def test_achievement_custom_cap():
    assert achievement(50, 0, cap=Decimal("500")) == Decimal("500")


def test_variance_percent():
    assert variance_percent(120, 100) == Decimal("20")
    assert variance_percent(-120, -100) == Decimal("-20")
    assert variance_percent(500, 0) == Decimal("0")
    assert variance_percent(1000, 100) == Decimal("900")


def test_margin_percent():
    assert margin_percent(25, 200) == Decimal("12.5")
    assert margin_percent(25, 0) == Decimal("0")


def test_health_status_thresholds():
    assert health_status(Decimal("1.5")) == "Healthy"
    assert health_status(Decimal("1.0")) == "Caution"
    assert health_status(Decimal("0.99")) == "Critical"


def test_working_capital_analysis():
    figures = WorkingCapitalFigures(
        current_assets=Decimal("3000"),
        current_liabilities=Decimal("1500"),
        cash=Decimal("500"),
        marketable_securities=Decimal("250"),
        accounts_receivable=Decimal("1000"),
        inventory=Decimal("600"),
        accounts_payable=Decimal("400"),
        revenue=Decimal("7300"),
        cost_of_goods_sold=Decimal("3650"),
        total_assets=Decimal("6000"),
    )

    analysis = analyze_working_capital(figures)

    assert analysis.working_capital == Decimal("1500.00")
    assert analysis.liquidity.current_ratio == Decimal("2.00")
    assert analysis.liquidity.quick_ratio == Decimal("1.60")
    assert analysis.liquidity.cash_ratio == Decimal("0.50")
    assert analysis.efficiency.days_sales_outstanding == Decimal("50.00")
    assert analysis.efficiency.days_inventory_outstanding == Decimal("60.00")
    assert analysis.efficiency.days_payable_outstanding == Decimal("40.00")
    assert analysis.efficiency.cash_conversion_cycle == Decimal("70.00")
    assert analysis.efficiency.working_capital_turnover == Decimal("4.87")
    assert analysis.efficiency.working_capital_ratio == Decimal("0.25")
    assert analysis.efficiency.days_working_capital == Decimal("75.00")
    assert analysis.health_status == "Healthy"


def test_working_capital_with_zero_denominators():
    analysis = analyze_working_capital(WorkingCapitalFigures(current_assets=Decimal("100")))

    assert analysis.liquidity.current_ratio == Decimal("0.00")
    assert analysis.efficiency.days_sales_outstanding == Decimal("0.00")
    assert analysis.efficiency.cash_conversion_cycle == Decimal("0.00")
    assert analysis.health_status == "Critical"
