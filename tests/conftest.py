"""Shared pytest fixtures for glreports tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from glreports.database.factories import open_ledger
from glreports.domain.assembler import ReportAssembler
from glreports.domain.entities import ClassKind
from glreports.domain.hierarchy import HierarchyWalker
from glreports.domain.journal import JournalService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = open_ledger(db_path)
    # Store the path for tests that need it
    db.database_path = db_path

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def assembler(temp_db):
    """Create a ReportAssembler with a temporary database."""
    return ReportAssembler(temp_db)


@pytest.fixture
def walker(temp_db):
    """Create a HierarchyWalker with a temporary database."""
    return HierarchyWalker(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def sample_chart(temp_db):
    """Create a small chart of accounts and return the class and type IDs.

    Assets
        Current Assets
            1200 Accounts Receivable
            Bank
                1060 Checking Account
    Liabilities
        Current Liabilities
            2100 Accounts Payable
    Equity
        Capital
            3000 Share Capital
    Income
        Sales
            4010 Sales
    Expenses
        Operating Expenses
            5010 Rent
            5020 Office Supplies
    """
    ids = {}
    ids["assets"] = temp_db.create_account_class("Assets", ClassKind.ASSET)
    ids["liabilities"] = temp_db.create_account_class("Liabilities", ClassKind.LIABILITY)
    ids["equity"] = temp_db.create_account_class("Equity", ClassKind.EQUITY)
    ids["income"] = temp_db.create_account_class("Income", ClassKind.INCOME)
    ids["expenses"] = temp_db.create_account_class("Expenses", ClassKind.EXPENSE)

    ids["current_assets"] = temp_db.create_account_type("Current Assets", ids["assets"])
    ids["bank"] = temp_db.create_account_type("Bank", ids["assets"], ids["current_assets"])
    ids["current_liabilities"] = temp_db.create_account_type(
        "Current Liabilities", ids["liabilities"]
    )
    ids["capital"] = temp_db.create_account_type("Capital", ids["equity"])
    ids["sales"] = temp_db.create_account_type("Sales", ids["income"])
    ids["operating"] = temp_db.create_account_type("Operating Expenses", ids["expenses"])

    temp_db.create_account("1200", "Accounts Receivable", ids["current_assets"])
    temp_db.create_account("1060", "Checking Account", ids["bank"])
    temp_db.create_account("2100", "Accounts Payable", ids["current_liabilities"])
    temp_db.create_account("3000", "Share Capital", ids["capital"])
    temp_db.create_account("4010", "Sales", ids["sales"])
    temp_db.create_account("5010", "Rent", ids["operating"])
    temp_db.create_account("5020", "Office Supplies", ids["operating"])
    return ids


@pytest.fixture
def activity_ledger(temp_db):
    """Chart with separate cash, receivable and fixed asset types plus a year of postings.

    2023-01-10  share capital 1000 paid in, equipment 400 bought for cash
    2024-01     capital 5000, credit sale 1000, customer pays 600,
                rent 300 on credit, equipment 2000, loan 1500
    """
    ids = {}
    assets = temp_db.create_account_class("Assets", ClassKind.ASSET)
    liabilities = temp_db.create_account_class("Liabilities", ClassKind.LIABILITY)
    equity = temp_db.create_account_class("Equity", ClassKind.EQUITY)
    income = temp_db.create_account_class("Income", ClassKind.INCOME)
    expenses = temp_db.create_account_class("Expenses", ClassKind.EXPENSE)

    ids["cash"] = temp_db.create_account_type("Cash", assets)
    ids["receivables"] = temp_db.create_account_type("Receivables", assets)
    ids["fixed_assets"] = temp_db.create_account_type("Fixed Assets", assets)
    ids["payables"] = temp_db.create_account_type("Payables", liabilities)
    ids["loans"] = temp_db.create_account_type("Loans", liabilities)
    ids["capital"] = temp_db.create_account_type("Capital", equity)
    ids["sales"] = temp_db.create_account_type("Sales", income)
    ids["operating"] = temp_db.create_account_type("Operating Expenses", expenses)

    for code, name, type_key in (
        ("1060", "Checking Account", "cash"),
        ("1200", "Accounts Receivable", "receivables"),
        ("1500", "Equipment", "fixed_assets"),
        ("2100", "Accounts Payable", "payables"),
        ("2500", "Bank Loan", "loans"),
        ("3000", "Share Capital", "capital"),
        ("4010", "Sales", "sales"),
        ("5010", "Rent", "operating"),
    ):
        temp_db.create_account(code, name, ids[type_key])

    postings = [
        (date(2023, 1, 10), "1060", "3000", Decimal("1000")),
        (date(2023, 1, 10), "1500", "1060", Decimal("400")),
        (date(2024, 1, 5), "1060", "3000", Decimal("5000")),
        (date(2024, 1, 10), "1200", "4010", Decimal("1000")),
        (date(2024, 1, 15), "1060", "1200", Decimal("600")),
        (date(2024, 1, 20), "5010", "2100", Decimal("300")),
        (date(2024, 1, 25), "1500", "1060", Decimal("2000")),
        (date(2024, 1, 28), "1060", "2500", Decimal("1500")),
    ]
    for type_no, (tran_date, debit, credit, amount) in enumerate(postings, start=1):
        temp_db.post_entry(0, type_no, tran_date, debit, amount)
        temp_db.post_entry(0, type_no, tran_date, credit, -amount)
    return ids


@pytest.fixture
def fiscal_year_2024(temp_db):
    """Create the 2024 calendar fiscal year and return its ID."""
    return temp_db.create_fiscal_year(date(2024, 1, 1), date(2024, 12, 31))


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
