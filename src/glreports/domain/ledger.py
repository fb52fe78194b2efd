"""Ledger aggregation domain service."""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from glreports.database.base import Database
from glreports.domain.entities import DimensionFilter, TimeWindow

logger = logging.getLogger(__name__)


class LedgerAggregator:
    """Service for summing ledger amounts per account and window."""

    def __init__(self, db: Database):
        """Initialize ledger aggregator.

        Args:
            db: Database instance
        """
        self.db = db

    def balance(
        self,
        account_code: str,
        window: TimeWindow,
        dimensions: Optional[DimensionFilter] = None,
    ) -> Decimal:
        """Return the debit-positive sum of one account inside a window."""
        return self.db.fetch_sum(account_code, window, dimensions)

    def balances(
        self,
        account_codes: Sequence[str],
        window: TimeWindow,
        dimensions: Optional[DimensionFilter] = None,
    ) -> dict[str, Decimal]:
        """Return debit-positive sums of several accounts inside one window."""
        codes = list(dict.fromkeys(account_codes))
        if not codes:
            return {}
        return self.db.fetch_sums(codes, window, dimensions)

    def window_balances(
        self,
        account_codes: Sequence[str],
        windows: Sequence[TimeWindow],
        dimensions: Optional[DimensionFilter] = None,
    ) -> dict[str, dict[str, Decimal]]:
        """Return sums per account and window name, one query per window.

        Returns:
            Mapping of account code to a mapping of window name to amount
        """
        result: dict[str, dict[str, Decimal]] = {
            code: {window.name: Decimal("0") for window in windows} for code in account_codes
        }
        for window in windows:
            sums = self.balances(account_codes, window, dimensions)
            for code, amount in sums.items():
                result[code][window.name] = amount
        logger.debug(
            "Aggregated %d accounts over windows %s",
            len(result),
            [window.name for window in windows],
        )
        return result
