"""Tests for report assembly."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from glreports.domain import assembler as presets
from glreports.domain.entities import ClassKind, ComparisonMode, DimensionFilter, NodeKind
from glreports.domain.errors import InvalidRangeError, NotFoundError, ValidationError
from glreports.domain.hierarchy import iter_nodes

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)
FEB_START = date(2024, 2, 1)
FEB_END = date(2024, 2, 29)


@pytest.fixture
def three_accounts(temp_db):
    """One class, one type, accounts A (debit 100), B (credit 40) and C (0)."""
    class_id = temp_db.create_account_class("Assets", ClassKind.ASSET)
    type_id = temp_db.create_account_type("Current Assets", class_id)
    for code, name in (("1000", "A"), ("1001", "B"), ("1002", "C")):
        temp_db.create_account(code, name, type_id)
    temp_db.post_entry(0, 1, date(2024, 1, 15), "1000", Decimal("100"))
    temp_db.post_entry(0, 1, date(2024, 1, 15), "1001", Decimal("-40"))
    temp_db.post_entry(0, 1, date(2024, 1, 15), "1002", Decimal("0"))


@pytest.fixture
def ledger_entries(temp_db, sample_chart, fiscal_year_2024):
    """Income and expense activity across 2023 and 2024."""
    temp_db.post_entry(10, 1, date(2023, 2, 10), "1200", Decimal("250"))
    temp_db.post_entry(10, 1, date(2023, 2, 10), "4010", Decimal("-250"))
    temp_db.post_entry(10, 2, date(2024, 1, 10), "1200", Decimal("1000"))
    temp_db.post_entry(10, 2, date(2024, 1, 10), "4010", Decimal("-1000"))
    temp_db.post_entry(20, 1, date(2024, 1, 20), "5010", Decimal("400"))
    temp_db.post_entry(20, 1, date(2024, 1, 20), "1060", Decimal("-400"))
    temp_db.post_entry(10, 3, date(2024, 2, 10), "1200", Decimal("500"), dimension_id=7)
    temp_db.post_entry(10, 3, date(2024, 2, 10), "4010", Decimal("-500"), dimension_id=7)
    temp_db.post_budget_entry(date(2024, 2, 1), "4010", Decimal("-600"))
    return sample_chart


def _class_node(result, label):
    return next(node for node in result.tree if node.label == label)


class TestTrialBalance:
    def test_roundtrip_scenario(self, assembler, three_accounts):
        result = assembler.generate(presets.trial_balance(JAN_START, JAN_END))

        class_node = result.tree[0]
        type_node = class_node.children[0]
        assert class_node.amounts["current"] == Decimal("60.00")
        assert type_node.amounts["current"] == Decimal("60.00")
        assert [child.code for child in type_node.children] == ["1000", "1001"]
        assert result.summary.account_count == 2
        assert result.summary.amounts["current"] == Decimal("60.00")

    def test_suppression_does_not_change_totals(self, assembler, three_accounts):
        suppressed = assembler.generate(presets.trial_balance(JAN_START, JAN_END))
        full = assembler.generate(presets.trial_balance(JAN_START, JAN_END, include_zero=True))

        assert full.summary.amounts == suppressed.summary.amounts
        assert full.summary.account_count == 3
        assert [child.code for child in full.tree[0].children[0].children] == [
            "1000",
            "1001",
            "1002",
        ]

    def test_balance_windows(self, assembler, ledger_entries):
        result = assembler.generate(presets.trial_balance(FEB_START, FEB_END))
        amounts = {
            node.code: node.amounts for node in iter_nodes(result.tree) if node.code is not None
        }

        assert amounts["1200"]["brought_forward"] == Decimal("1250.00")
        assert amounts["1200"]["current"] == Decimal("500.00")
        assert amounts["1200"]["total"] == Decimal("1750.00")
        assert amounts["4010"]["total"] == Decimal("-1750.00")
        assert result.summary.is_balanced
        assert result.summary.account_count == 4

    def test_unbalanced_ledger_is_flagged(self, assembler, three_accounts):
        result = assembler.generate(presets.trial_balance(JAN_START, JAN_END))
        assert not result.summary.is_balanced

    def test_reversed_range(self, assembler, three_accounts):
        with pytest.raises(InvalidRangeError):
            assembler.generate(presets.trial_balance(JAN_END, JAN_START))


class TestProfitAndLoss:
    def test_accumulated_comparison(self, assembler, ledger_entries):
        result = assembler.generate(presets.profit_and_loss(FEB_START, FEB_END))

        assert [window.name for window in result.windows] == ["current", "accumulated"]
        income = _class_node(result, "Income")
        expenses = _class_node(result, "Expenses")
        assert income.amounts == {"current": Decimal("500.00"), "accumulated": Decimal("1500.00")}
        assert income.achieved_percent == Decimal("33.33")
        assert expenses.amounts["accumulated"] == Decimal("400.00")
        assert expenses.achieved_percent == Decimal("0.00")
        assert result.summary.net_amounts == {
            "current": Decimal("500.00"),
            "accumulated": Decimal("1100.00"),
        }

    def test_only_income_and_expense_classes(self, assembler, ledger_entries):
        result = assembler.generate(presets.profit_and_loss(FEB_START, FEB_END))
        assert [node.label for node in result.tree] == ["Income", "Expenses"]

    def test_budget_comparison(self, assembler, ledger_entries):
        config = presets.profit_and_loss(FEB_START, FEB_END, compare=ComparisonMode.BUDGET)
        result = assembler.generate(config)

        income = _class_node(result, "Income")
        assert income.amounts["budget"] == Decimal("600.00")
        assert income.achieved_percent == Decimal("83.33")

    def test_prior_year_comparison(self, assembler, ledger_entries):
        config = presets.profit_and_loss(FEB_START, FEB_END, compare=ComparisonMode.PRIOR_YEAR)
        result = assembler.generate(config)

        prior = result.windows[1]
        assert (prior.start, prior.end) == (date(2023, 2, 1), date(2023, 2, 28))
        income = _class_node(result, "Income")
        assert income.amounts["prior_year"] == Decimal("250.00")
        assert income.achieved_percent == Decimal("200.00")
        assert result.summary.achieved_percent == Decimal("200.00")

    def test_dimension_filter(self, assembler, ledger_entries):
        config = presets.profit_and_loss(
            JAN_START, FEB_END, dimensions=DimensionFilter(dimension_id=7)
        )
        result = assembler.generate(config)

        assert _class_node(result, "Income").amounts["current"] == Decimal("500.00")
        assert [node.label for node in result.tree] == ["Income"]

    def test_unsupported_comparison(self):
        with pytest.raises(ValidationError):
            presets.profit_and_loss(FEB_START, FEB_END, compare=ComparisonMode.BALANCES)

    def test_configurable_policy_constants(self, assembler, ledger_entries):
        config = presets.profit_and_loss(FEB_START, FEB_END, compare=ComparisonMode.BUDGET)
        config = replace(config, achievement_cap=Decimal("50"))
        result = assembler.generate(config)

        assert _class_node(result, "Income").achieved_percent == Decimal("50.00")


class TestBalanceSheet:
    def test_credit_classes_display_positive(self, assembler, temp_db, sample_chart):
        temp_db.post_entry(0, 1, date(2024, 1, 2), "1060", Decimal("5000"))
        temp_db.post_entry(0, 1, date(2024, 1, 2), "3000", Decimal("-5000"))
        temp_db.post_entry(0, 2, date(2024, 1, 5), "5020", Decimal("120"))
        temp_db.post_entry(0, 2, date(2024, 1, 5), "2100", Decimal("-120"))

        result = assembler.generate(presets.balance_sheet(JAN_START, JAN_END))

        assert [node.label for node in result.tree] == ["Assets", "Liabilities", "Equity"]
        assert _class_node(result, "Equity").amounts["total"] == Decimal("5000.00")
        assert _class_node(result, "Liabilities").amounts["total"] == Decimal("120.00")
        assert _class_node(result, "Assets").amounts["total"] == Decimal("5000.00")


class TestAnnualExpenseBreakdown:
    def test_monthly_columns(self, assembler, ledger_entries, fiscal_year_2024):
        result = assembler.generate(presets.annual_expense_breakdown(fiscal_year_2024))

        assert len(result.windows) == 13
        assert (result.start_date, result.end_date) == (date(2024, 1, 1), date(2024, 12, 31))
        income = _class_node(result, "Income")
        assert income.amounts["m01"] == Decimal("1000.00")
        assert income.amounts["m02"] == Decimal("500.00")
        assert income.amounts["m03"] == Decimal("0.00")
        assert income.amounts["total"] == Decimal("1500.00")

    def test_in_thousands(self, assembler, ledger_entries, fiscal_year_2024):
        config = presets.annual_expense_breakdown(fiscal_year_2024, in_thousands=True)
        result = assembler.generate(config)

        assert _class_node(result, "Income").amounts["total"] == Decimal("1.50")
        assert _class_node(result, "Expenses").amounts["m01"] == Decimal("0.40")
        for window in result.windows:
            class_total = sum(node.amounts[window.name] for node in result.tree)
            assert result.summary.amounts[window.name] == class_total

    def test_from_end_date(self, assembler, ledger_entries):
        config = presets.annual_expense_breakdown(end_date=date(2024, 2, 15))
        result = assembler.generate(config)

        assert result.windows[0].start == date(2023, 3, 1)
        assert _class_node(result, "Income").amounts["total"] == Decimal("1500.00")

    def test_unknown_fiscal_year(self, assembler, sample_chart):
        with pytest.raises(NotFoundError):
            assembler.generate(presets.annual_expense_breakdown(42))

    def test_requires_year_or_date(self):
        with pytest.raises(ValidationError):
            presets.annual_expense_breakdown()


class TestJournalReports:
    def test_journal_entries(self, assembler, ledger_entries):
        result = assembler.generate(presets.journal_entries(JAN_START, JAN_END))

        assert [txn.type for txn in result.transactions] == [10, 20]
        assert result.journal_summary.is_balanced
        assert result.total_amount is None

    def test_journal_by_type(self, assembler, ledger_entries):
        result = assembler.generate(presets.journal_entries(JAN_START, FEB_END, trans_type=10))
        assert [txn.type_no for txn in result.transactions] == [2, 3]

    def test_audit_trail_total_only_with_type_filter(self, assembler, ledger_entries):
        unfiltered = assembler.generate(presets.audit_trail(JAN_START, FEB_END))
        filtered = assembler.generate(presets.audit_trail(JAN_START, FEB_END, trans_type=10))

        assert unfiltered.total_amount is None
        assert filtered.total_amount == Decimal("1500.00")


class TestAccountTransactions:
    def test_opening_balances_by_class(self, assembler, ledger_entries):
        config = presets.account_transactions(FEB_START, FEB_END)
        result = assembler.generate(config)
        ledgers = {ledger.account: ledger for ledger in result.account_ledgers}

        assert sorted(ledgers) == ["1060", "1200", "4010", "5010"]
        # Balance sheet accounts carry everything before the period
        assert ledgers["1200"].opening_balance == Decimal("1250.00")
        assert ledgers["1200"].closing_balance == Decimal("1750.00")
        # Income statement accounts start at the fiscal year begin
        assert ledgers["4010"].opening_balance == Decimal("-1000.00")
        assert ledgers["4010"].closing_balance == Decimal("-1500.00")
        assert ledgers["5010"].lines == ()

    def test_account_range(self, assembler, ledger_entries):
        config = presets.account_transactions(
            FEB_START, FEB_END, from_account="4000", to_account="4999"
        )
        result = assembler.generate(config)

        assert [ledger.account for ledger in result.account_ledgers] == ["4010"]


def test_result_contract_serializes(assembler, ledger_entries):
    result = assembler.generate(presets.profit_and_loss(FEB_START, FEB_END))
    data = result.to_dict()

    assert data["report"] == "profit_and_loss"
    assert data["period"] == {"start_date": "2024-02-01", "end_date": "2024-02-29"}
    assert data["summary"]["account_count"] == 2
    income = data["tree"][0]
    assert income["kind"] == NodeKind.CLASS.value
    assert income["achieved_percent"] == pytest.approx(33.33)
    assert "transactions" not in data
