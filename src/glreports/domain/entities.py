"""Domain model entities for glreports.

These are pure data classes representing chart-of-accounts and ledger
concepts, independent of database schema. Every report run builds these
fresh from the ledger and discards them afterwards.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Optional

from glreports.domain.ratios import WorkingCapitalAnalysis


class ClassKind(IntEnum):
    """Account class kind, which determines the sign convention."""

    ASSET = 1
    LIABILITY = 2
    EQUITY = 3
    INCOME = 4
    EXPENSE = 5

    @property
    def is_balance_sheet(self) -> bool:
        return self in (ClassKind.ASSET, ClassKind.LIABILITY, ClassKind.EQUITY)


class LedgerSource(str, Enum):
    """Ledger table a window is aggregated from."""

    GL = "gl"
    BUDGET = "budget"


class NodeKind(str, Enum):
    """Level of an aggregate node in the chart hierarchy."""

    CLASS = "class"
    TYPE = "type"
    ACCOUNT = "account"


class ComparisonMode(str, Enum):
    """How comparison windows are derived from the report period."""

    NONE = "none"
    ACCUMULATED = "accumulated"
    PRIOR_YEAR = "prior-year"
    BUDGET = "budget"
    BALANCES = "balances"
    ROLLING_12_MONTH = "rolling-12-month"


@dataclass(frozen=True)
class AccountClass:
    """Top level of the chart of accounts."""

    id: int
    name: str
    kind: ClassKind


@dataclass(frozen=True)
class AccountType:
    """Account type; parent_id links sub-types to their parent type."""

    id: int
    name: str
    class_id: int
    parent_id: Optional[int] = None


@dataclass(frozen=True)
class Account:
    """Ledger account (leaf of the chart of accounts)."""

    code: str
    name: str
    type_id: int


@dataclass(frozen=True)
class FiscalYear:
    """Fiscal year boundaries."""

    id: int
    begin: date
    end: date
    closed: bool = False


@dataclass(frozen=True)
class TimeWindow:
    """Named date range that ledger entries are bucketed into.

    A missing start means "from the beginning of the ledger". The end is
    inclusive unless end_inclusive is False, which is how brought-forward
    and monthly windows avoid counting the boundary date twice.
    """

    name: str
    start: Optional[date]
    end: date
    end_inclusive: bool = True
    source: LedgerSource = LedgerSource.GL
    label: Optional[str] = None

    def contains(self, day: date) -> bool:
        """Return True if a ledger date falls inside this window."""
        if self.start is not None and day < self.start:
            return False
        if self.end_inclusive:
            return day <= self.end
        return day < self.end

    @property
    def display_label(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class DimensionFilter:
    """Optional dimension tags to restrict ledger entries to (0 means all)."""

    dimension_id: int = 0
    dimension2_id: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.dimension_id and not self.dimension2_id


@dataclass(frozen=True)
class LedgerRow:
    """Raw general-ledger row. Positive amounts are debits."""

    type: int
    type_no: int
    tran_date: date
    account: str
    amount: Decimal
    account_name: str = ""
    memo: str = ""
    dimension_id: int = 0
    dimension2_id: int = 0
    person_id: Optional[str] = None
    counter: int = 0


@dataclass(frozen=True)
class AggregateNode:
    """Node of an aggregated chart-of-accounts tree.

    A node owns its children. amounts maps window names to display-signed
    totals; has_material_balance is True when any window amount reaches the
    materiality threshold.
    """

    id: str
    label: str
    kind: NodeKind
    amounts: dict[str, Decimal] = field(default_factory=dict)
    children: tuple["AggregateNode", ...] = ()
    has_material_balance: bool = False
    achieved_percent: Optional[Decimal] = None
    code: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "amounts": {name: float(value) for name, value in self.amounts.items()},
            "children": [child.to_dict() for child in self.children],
        }
        if self.code is not None:
            data["code"] = self.code
        if self.achieved_percent is not None:
            data["achieved_percent"] = float(self.achieved_percent)
        return data


@dataclass(frozen=True)
class TransactionLine:
    """One ledger row inside a grouped transaction."""

    account: str
    amount: Decimal
    debit: Decimal
    credit: Decimal
    account_name: str = ""
    memo: str = ""
    dimension_id: int = 0
    dimension2_id: int = 0
    person_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "account": self.account,
            "account_name": self.account_name,
            "debit": float(self.debit),
            "credit": float(self.credit),
            "memo": self.memo,
        }


@dataclass(frozen=True)
class Transaction:
    """Ledger rows sharing one (type, sequence number) key."""

    type: int
    type_no: int
    tran_date: date
    lines: tuple[TransactionLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool

    @property
    def difference(self) -> Decimal:
        return abs(self.total_debit - self.total_credit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "sequence_no": self.type_no,
            "date": self.tran_date.isoformat(),
            "lines": [line.to_dict() for line in self.lines],
            "total_debit": float(self.total_debit),
            "total_credit": float(self.total_credit),
            "is_balanced": self.is_balanced,
        }


@dataclass(frozen=True)
class JournalSummary:
    """Totals over a list of grouped transactions."""

    total_debit: Decimal
    total_credit: Decimal
    transaction_count: int
    unbalanced_count: int
    is_balanced: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_debit": float(self.total_debit),
            "total_credit": float(self.total_credit),
            "transaction_count": self.transaction_count,
            "unbalanced_count": self.unbalanced_count,
            "is_balanced": self.is_balanced,
        }


@dataclass(frozen=True)
class AccountLedgerLine:
    """Ledger row annotated with the running balance after it."""

    type: int
    type_no: int
    tran_date: date
    amount: Decimal
    balance: Decimal
    memo: str = ""


@dataclass(frozen=True)
class AccountLedger:
    """Transactions of one account between an opening and closing balance."""

    account: str
    account_name: str
    opening_balance: Decimal
    lines: tuple[AccountLedgerLine, ...]
    closing_balance: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "account": self.account,
            "account_name": self.account_name,
            "opening_balance": float(self.opening_balance),
            "lines": [
                {
                    "type": line.type,
                    "sequence_no": line.type_no,
                    "date": line.tran_date.isoformat(),
                    "amount": float(line.amount),
                    "balance": float(line.balance),
                    "memo": line.memo,
                }
                for line in self.lines
            ],
            "closing_balance": float(self.closing_balance),
        }


@dataclass(frozen=True)
class ReportSummary:
    """Grand totals of an aggregated report."""

    amounts: dict[str, Decimal]
    is_balanced: bool
    account_count: int
    achieved_percent: Optional[Decimal] = None
    net_amounts: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "amounts": {name: float(value) for name, value in self.amounts.items()},
            "achieved_percent": (
                float(self.achieved_percent) if self.achieved_percent is not None else None
            ),
            "is_balanced": self.is_balanced,
            "account_count": self.account_count,
            "net_amounts": {name: float(value) for name, value in self.net_amounts.items()},
        }


@dataclass(frozen=True)
class CashFlowSummary:
    """Cash position around each period window of a cash flow statement.

    net_change is the sum of all activity sections; the statement reconciles
    when opening cash plus net_change equals closing cash in every window.
    variance_percent maps activity names (and "net_change") to the change
    against the prior-year window, empty when no comparison was requested.
    """

    opening_cash: dict[str, Decimal]
    net_change: dict[str, Decimal]
    closing_cash: dict[str, Decimal]
    is_reconciled: bool
    variance_percent: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "opening_cash": {name: float(value) for name, value in self.opening_cash.items()},
            "net_change": {name: float(value) for name, value in self.net_change.items()},
            "closing_cash": {name: float(value) for name, value in self.closing_cash.items()},
            "is_reconciled": self.is_reconciled,
            "variance_percent": {
                name: float(value) for name, value in self.variance_percent.items()
            },
        }


@dataclass(frozen=True)
class ReportResult:
    """Output contract of one report run, consumed by renderers."""

    title: str
    report_key: str
    start_date: Optional[date]
    end_date: Optional[date]
    windows: tuple[TimeWindow, ...] = ()
    tree: tuple[AggregateNode, ...] = ()
    summary: Optional[ReportSummary] = None
    transactions: tuple[Transaction, ...] = ()
    journal_summary: Optional[JournalSummary] = None
    account_ledgers: tuple[AccountLedger, ...] = ()
    total_amount: Optional[Decimal] = None
    cash_flow: Optional[CashFlowSummary] = None
    working_capital: Optional[WorkingCapitalAnalysis] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "report": self.report_key,
            "period": {
                "start_date": self.start_date.isoformat() if self.start_date else None,
                "end_date": self.end_date.isoformat() if self.end_date else None,
            },
        }
        if self.windows:
            data["windows"] = [
                {
                    "name": window.name,
                    "label": window.display_label,
                    "start": window.start.isoformat() if window.start else None,
                    "end": window.end.isoformat(),
                    "end_inclusive": window.end_inclusive,
                    "source": window.source.value,
                }
                for window in self.windows
            ]
        if self.summary is not None:
            data["tree"] = [node.to_dict() for node in self.tree]
            data["summary"] = self.summary.to_dict()
        if self.journal_summary is not None:
            data["transactions"] = [txn.to_dict() for txn in self.transactions]
            data["journal_summary"] = self.journal_summary.to_dict()
        if self.account_ledgers:
            data["accounts"] = [ledger.to_dict() for ledger in self.account_ledgers]
        if self.total_amount is not None:
            data["total_amount"] = float(self.total_amount)
        if self.cash_flow is not None:
            data["cash_flow"] = self.cash_flow.to_dict()
        if self.working_capital is not None:
            data["working_capital"] = self.working_capital.to_dict()
        return data
