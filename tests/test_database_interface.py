"""Tests for the Database interface returning domain models."""

from datetime import date
from decimal import Decimal

import pytest

from glreports.database.factories import DB_PATH_ENVVAR, default_ledger_path, open_ledger
from glreports.domain import entities
from glreports.domain.entities import ClassKind, DimensionFilter, LedgerSource, TimeWindow
from glreports.domain.errors import ConflictError, InvalidRangeError, NotFoundError

JANUARY = TimeWindow(name="current", start=date(2024, 1, 1), end=date(2024, 1, 31))


class TestChartOfAccounts:
    def test_get_account_class_returns_domain_model(self, temp_db):
        class_id = temp_db.create_account_class("Assets", ClassKind.ASSET)

        account_class = temp_db.get_account_class(class_id)

        assert isinstance(account_class, entities.AccountClass)
        assert account_class.kind == ClassKind.ASSET
        assert account_class.name == "Assets"

    def test_fetch_types_by_parent(self, temp_db, sample_chart):
        top_level = temp_db.fetch_types(sample_chart["assets"])
        children = temp_db.fetch_types(sample_chart["assets"], sample_chart["current_assets"])

        assert [t.name for t in top_level] == ["Current Assets"]
        assert [t.name for t in children] == ["Bank"]
        assert children[0].parent_id == sample_chart["current_assets"]

    def test_fetch_accounts_ordered_by_code(self, temp_db, sample_chart):
        accounts = temp_db.fetch_accounts(sample_chart["operating"])
        assert [a.code for a in accounts] == ["5010", "5020"]
        assert all(isinstance(a, entities.Account) for a in accounts)

    def test_list_accounts_in_range(self, temp_db, sample_chart):
        accounts = temp_db.list_accounts("2000", "4999")
        assert [a.code for a in accounts] == ["2100", "3000", "4010"]

    def test_duplicate_account_code(self, temp_db, sample_chart):
        with pytest.raises(ConflictError):
            temp_db.create_account("1060", "Other", sample_chart["bank"])

    def test_missing_references(self, temp_db, sample_chart):
        with pytest.raises(NotFoundError):
            temp_db.create_account_type("Orphan", 999)
        with pytest.raises(NotFoundError):
            temp_db.create_account_type("Orphan", sample_chart["assets"], 999)
        with pytest.raises(NotFoundError):
            temp_db.create_account("9999", "Orphan", 999)


class TestFiscalYears:
    def test_find_fiscal_year(self, temp_db, fiscal_year_2024):
        fiscal_year = temp_db.find_fiscal_year(date(2024, 6, 1))

        assert isinstance(fiscal_year, entities.FiscalYear)
        assert fiscal_year.id == fiscal_year_2024
        assert temp_db.find_fiscal_year(date(2025, 1, 1)) is None

    def test_reversed_fiscal_year(self, temp_db):
        with pytest.raises(InvalidRangeError):
            temp_db.create_fiscal_year(date(2024, 12, 31), date(2024, 1, 1))


class TestLedgerAccess:
    def test_post_to_unknown_account(self, temp_db, sample_chart):
        with pytest.raises(NotFoundError):
            temp_db.post_entry(0, 1, date(2024, 1, 1), "9999", Decimal("1"))

    def test_fetch_sums_includes_every_code(self, temp_db, sample_chart):
        temp_db.post_entry(0, 1, date(2024, 1, 5), "1060", Decimal("10.50"))
        temp_db.post_entry(0, 2, date(2024, 1, 6), "1060", Decimal("4.25"))
        temp_db.post_entry(0, 3, date(2024, 2, 1), "1060", Decimal("99"))

        sums = temp_db.fetch_sums(["1060", "1200"], JANUARY)

        assert sums == {"1060": Decimal("14.75"), "1200": Decimal("0")}

    def test_fetch_sum_respects_half_open_window(self, temp_db, sample_chart):
        temp_db.post_entry(0, 1, date(2024, 1, 1), "1060", Decimal("5"))
        brought_forward = TimeWindow(
            name="brought_forward", start=None, end=date(2024, 1, 1), end_inclusive=False
        )

        assert temp_db.fetch_sum("1060", brought_forward) == Decimal("0")
        assert temp_db.fetch_sum("1060", JANUARY) == Decimal("5")

    def test_fetch_sum_by_dimension(self, temp_db, sample_chart):
        temp_db.post_entry(0, 1, date(2024, 1, 5), "5010", Decimal("10"), dimension_id=1)
        temp_db.post_entry(0, 2, date(2024, 1, 5), "5010", Decimal("20"), dimension_id=2)
        temp_db.post_entry(0, 3, date(2024, 1, 5), "5010", Decimal("40"), dimension_id=2, dimension2_id=9)

        assert temp_db.fetch_sum("5010", JANUARY) == Decimal("70")
        assert temp_db.fetch_sum("5010", JANUARY, DimensionFilter(dimension_id=2)) == Decimal("60")
        assert temp_db.fetch_sum("5010", JANUARY, DimensionFilter(2, 9)) == Decimal("40")

    def test_budget_window_reads_budget_ledger(self, temp_db, sample_chart):
        temp_db.post_entry(0, 1, date(2024, 1, 5), "4010", Decimal("-100"))
        temp_db.post_budget_entry(date(2024, 1, 1), "4010", Decimal("-150"))
        budget = TimeWindow(
            name="budget",
            start=date(2024, 1, 1),
            end=date(2024, 1, 31),
            source=LedgerSource.BUDGET,
        )

        assert temp_db.fetch_sum("4010", budget) == Decimal("-150")

    def test_fetch_rows_skips_zero_amounts_and_orders_by_transaction(self, temp_db, sample_chart):
        temp_db.post_entry(20, 1, date(2024, 1, 2), "5010", Decimal("30"))
        temp_db.post_entry(10, 2, date(2024, 1, 3), "1200", Decimal("50"))
        temp_db.post_entry(10, 1, date(2024, 1, 4), "1200", Decimal("0"))
        temp_db.post_entry(10, 1, date(2024, 1, 4), "4010", Decimal("-50"))

        rows = temp_db.fetch_rows(date(2024, 1, 1), date(2024, 1, 31))

        assert all(isinstance(row, entities.LedgerRow) for row in rows)
        assert [(row.type, row.type_no) for row in rows] == [(10, 1), (10, 2), (20, 1)]
        assert rows[0].account_name == "Sales"

    def test_fetch_rows_by_account_and_date(self, temp_db, sample_chart):
        temp_db.post_entry(20, 1, date(2024, 1, 9), "1060", Decimal("1"))
        temp_db.post_entry(10, 1, date(2024, 1, 2), "1060", Decimal("2"))
        temp_db.post_entry(10, 1, date(2024, 1, 2), "1200", Decimal("3"))

        rows = temp_db.fetch_rows(account="1060", by_date=True)

        assert [row.amount for row in rows] == [Decimal("2"), Decimal("1")]


class TestFactories:
    def test_ledger_path_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(DB_PATH_ENVVAR, str(tmp_path / "books.db"))
        assert default_ledger_path() == tmp_path / "books.db"

    def test_ledger_path_defaults_to_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv(DB_PATH_ENVVAR, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert default_ledger_path() == tmp_path / ".glreports" / "ledger.db"
        assert (tmp_path / ".glreports").is_dir()

    def test_open_ledger_is_ready_for_posting(self, tmp_path):
        db = open_ledger(str(tmp_path / "fresh.db"))
        try:
            class_id = db.create_account_class("Assets", ClassKind.ASSET)
            type_id = db.create_account_type("Bank", class_id)
            db.create_account("1060", "Checking", type_id)
            db.post_entry(0, 1, date(2024, 1, 5), "1060", Decimal("10"))

            assert db.fetch_sum("1060", JANUARY) == Decimal("10.00")
        finally:
            db.disconnect()
