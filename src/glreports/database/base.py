"""Abstract database interface.

The interface is the only place ledger queries are built. Report services
see windows, filters and domain entities, never query strings.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from glreports.domain.entities import (
    Account,
    AccountClass,
    AccountType,
    ClassKind,
    DimensionFilter,
    FiscalYear,
    LedgerRow,
    TimeWindow,
)


class Database(ABC):
    """Abstract ledger data source and chart-of-accounts catalog."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_account_class(self, name: str, kind: ClassKind) -> int:
        """Create an account class. Returns class ID."""
        pass

    @abstractmethod
    def get_account_class(self, class_id: int) -> Optional[AccountClass]:
        """Get account class by ID."""
        pass

    @abstractmethod
    def fetch_classes(self, kinds: Optional[Iterable[ClassKind]] = None) -> list[AccountClass]:
        """List account classes ordered by ID, optionally restricted to kinds."""
        pass

    @abstractmethod
    def create_account_type(
        self, name: str, class_id: int, parent_id: Optional[int] = None
    ) -> int:
        """Create an account type. Returns type ID."""
        pass

    @abstractmethod
    def get_account_type(self, type_id: int) -> Optional[AccountType]:
        """Get account type by ID."""
        pass

    @abstractmethod
    def fetch_types(self, class_id: int, parent_id: Optional[int] = None) -> list[AccountType]:
        """List types of a class whose parent is parent_id (None for top level)."""
        pass

    @abstractmethod
    def create_account(self, code: str, name: str, type_id: int) -> str:
        """Create a ledger account. Returns the account code."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def fetch_accounts(self, type_id: int) -> list[Account]:
        """List accounts of a type ordered by code."""
        pass

    @abstractmethod
    def list_accounts(
        self, from_code: Optional[str] = None, to_code: Optional[str] = None
    ) -> list[Account]:
        """List accounts ordered by code, optionally within a code range."""
        pass

    # Fiscal year operations
    @abstractmethod
    def create_fiscal_year(self, begin: date, end: date, closed: bool = False) -> int:
        """Create a fiscal year. Returns fiscal year ID."""
        pass

    @abstractmethod
    def get_fiscal_year(self, fiscal_year_id: int) -> Optional[FiscalYear]:
        """Get fiscal year by ID."""
        pass

    @abstractmethod
    def find_fiscal_year(self, for_date: date) -> Optional[FiscalYear]:
        """Get the fiscal year containing a date."""
        pass

    # Ledger operations
    @abstractmethod
    def post_entry(
        self,
        trans_type: int,
        type_no: int,
        tran_date: date,
        account: str,
        amount: Decimal,
        memo: str = "",
        dimension_id: int = 0,
        dimension2_id: int = 0,
        person_id: Optional[str] = None,
    ) -> int:
        """Post a general-ledger entry. Returns the entry counter."""
        pass

    @abstractmethod
    def post_budget_entry(
        self,
        tran_date: date,
        account: str,
        amount: Decimal,
        dimension_id: int = 0,
        dimension2_id: int = 0,
    ) -> int:
        """Post a budget entry. Returns entry ID."""
        pass

    @abstractmethod
    def fetch_sum(
        self,
        account_code: str,
        window: TimeWindow,
        dimensions: Optional[DimensionFilter] = None,
    ) -> Decimal:
        """Sum ledger amounts of one account inside a window."""
        pass

    @abstractmethod
    def fetch_sums(
        self,
        account_codes: Sequence[str],
        window: TimeWindow,
        dimensions: Optional[DimensionFilter] = None,
    ) -> dict[str, Decimal]:
        """Sum ledger amounts of several accounts inside a window in one query.

        Every requested code is present in the result, with zero when the
        account has no entries in the window.
        """
        pass

    @abstractmethod
    def fetch_rows(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        trans_type: Optional[int] = None,
        account: Optional[str] = None,
        dimensions: Optional[DimensionFilter] = None,
        by_date: bool = False,
    ) -> list[LedgerRow]:
        """List non-zero ledger rows in a date range.

        Rows are ordered by (type, type_no, tran_date, counter), or by
        (tran_date, counter) when by_date is True.
        """
        pass
