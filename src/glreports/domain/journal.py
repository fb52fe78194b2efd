"""Transaction grouping and balance validation."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from glreports.database.base import Database
from glreports.domain.entities import (
    AccountLedger,
    AccountLedgerLine,
    DimensionFilter,
    JournalSummary,
    LedgerRow,
    TimeWindow,
    Transaction,
    TransactionLine,
)
from glreports.domain.money import MATERIALITY, round_money, within_tolerance

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _sort_key(row: LedgerRow) -> tuple:
    return (row.type, row.type_no, row.tran_date, row.counter)


def sort_rows(rows: Iterable[LedgerRow]) -> list[LedgerRow]:
    """Return rows in transaction order, leaving already ordered input untouched."""
    rows = list(rows)
    keys = [_sort_key(row) for row in rows]
    if all(keys[i] <= keys[i + 1] for i in range(len(keys) - 1)):
        return rows
    logger.debug("Sorting %d ledger rows into transaction order", len(rows))
    return sorted(rows, key=_sort_key)


class _OpenTransaction:
    """Transaction being accumulated during the grouping pass."""

    def __init__(self, row: LedgerRow):
        self.type = row.type
        self.type_no = row.type_no
        self.tran_date = row.tran_date
        self.lines: list[TransactionLine] = []
        self.debit = ZERO
        self.credit = ZERO

    def add(self, row: LedgerRow) -> None:
        amount = row.amount
        debit = amount if amount > 0 else ZERO
        credit = abs(amount) if amount < 0 else ZERO
        self.lines.append(
            TransactionLine(
                account=row.account,
                amount=amount,
                debit=debit,
                credit=credit,
                account_name=row.account_name,
                memo=row.memo,
                dimension_id=row.dimension_id,
                dimension2_id=row.dimension2_id,
                person_id=row.person_id,
            )
        )
        self.debit += debit
        self.credit += credit

    def close(self, tolerance: Decimal) -> Transaction:
        return Transaction(
            type=self.type,
            type_no=self.type_no,
            tran_date=self.tran_date,
            lines=tuple(self.lines),
            total_debit=round_money(self.debit),
            total_credit=round_money(self.credit),
            is_balanced=within_tolerance(self.debit, self.credit, tolerance),
        )


def group_transactions(
    rows: Iterable[LedgerRow], tolerance: Decimal = MATERIALITY
) -> list[Transaction]:
    """Group ledger rows into transactions keyed by (type, type_no).

    A single pass over rows in transaction order; a new transaction starts
    whenever the key changes. Unordered input is sorted first.
    """
    transactions: list[Transaction] = []
    current: Optional[_OpenTransaction] = None

    for row in sort_rows(rows):
        if current is None or (current.type, current.type_no) != (row.type, row.type_no):
            if current is not None:
                transactions.append(current.close(tolerance))
            current = _OpenTransaction(row)
        current.add(row)

    if current is not None:
        transactions.append(current.close(tolerance))
    return transactions


def summarize_transactions(
    transactions: Sequence[Transaction], tolerance: Decimal = MATERIALITY
) -> JournalSummary:
    """Total debits and credits over grouped transactions."""
    total_debit = sum((txn.total_debit for txn in transactions), ZERO)
    total_credit = sum((txn.total_credit for txn in transactions), ZERO)
    return JournalSummary(
        total_debit=round_money(total_debit),
        total_credit=round_money(total_credit),
        transaction_count=len(transactions),
        unbalanced_count=sum(1 for txn in transactions if not txn.is_balanced),
        is_balanced=within_tolerance(total_debit, total_credit, tolerance),
    )


class JournalService:
    """Service for transaction-style reports over raw ledger rows."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def journal(
        self,
        start_date: date,
        end_date: date,
        trans_type: Optional[int] = None,
        dimensions: Optional[DimensionFilter] = None,
        tolerance: Decimal = MATERIALITY,
    ) -> tuple[list[Transaction], JournalSummary]:
        """Group the ledger rows of a period into balanced-checked transactions."""
        rows = self.db.fetch_rows(
            start_date=start_date,
            end_date=end_date,
            trans_type=trans_type,
            dimensions=dimensions,
        )
        transactions = group_transactions(rows, tolerance)
        summary = summarize_transactions(transactions, tolerance)
        if summary.unbalanced_count:
            logger.info(
                "%d of %d transactions are unbalanced",
                summary.unbalanced_count,
                summary.transaction_count,
            )
        return transactions, summary

    def account_ledger(
        self,
        account_code: str,
        start_date: date,
        end_date: date,
        opening_from: Optional[date] = None,
        dimensions: Optional[DimensionFilter] = None,
    ) -> AccountLedger:
        """List one account's rows with opening, running and closing balances.

        Args:
            account_code: Account to list
            start_date: First date of the listing
            end_date: Last date of the listing
            opening_from: Date the opening balance accumulates from (None for
                the start of the ledger)
            dimensions: Optional dimension filter
        """
        account = self.db.get_account(account_code)
        opening_window = TimeWindow(
            name="opening",
            start=opening_from,
            end=start_date,
            end_inclusive=False,
        )
        opening = self.db.fetch_sum(account_code, opening_window, dimensions)
        rows = self.db.fetch_rows(
            start_date=start_date,
            end_date=end_date,
            account=account_code,
            dimensions=dimensions,
            by_date=True,
        )

        running = opening
        lines = []
        for row in rows:
            running += row.amount
            lines.append(
                AccountLedgerLine(
                    type=row.type,
                    type_no=row.type_no,
                    tran_date=row.tran_date,
                    amount=row.amount,
                    balance=round_money(running),
                    memo=row.memo,
                )
            )

        return AccountLedger(
            account=account_code,
            account_name=account.name if account is not None else "",
            opening_balance=round_money(opening),
            lines=tuple(lines),
            closing_balance=round_money(running),
        )
