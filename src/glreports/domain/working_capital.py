"""Working-capital analysis read from the ledger."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from glreports.database.base import Database
from glreports.domain.entities import ClassKind, DimensionFilter, TimeWindow
from glreports.domain.hierarchy import HierarchyWalker, select_types
from glreports.domain.money import round_money
from glreports.domain.ratios import (
    WorkingCapitalAnalysis,
    WorkingCapitalFigures,
    analyze_working_capital,
)

logger = logging.getLogger(__name__)

BALANCE = "balance"
PERIOD = "period"


@dataclass(frozen=True)
class WorkingCapitalMapping:
    """Account types each working-capital figure is read from.

    Balance figures are taken at the end date, revenue and cost of sales
    over the period. Revenue defaults to every income class when no types
    are given; total assets always covers every asset class.
    """

    current_asset_type_ids: tuple[int, ...] = ()
    current_liability_type_ids: tuple[int, ...] = ()
    cash_type_ids: tuple[int, ...] = ()
    marketable_security_type_ids: tuple[int, ...] = ()
    receivable_type_ids: tuple[int, ...] = ()
    inventory_type_ids: tuple[int, ...] = ()
    payable_type_ids: tuple[int, ...] = ()
    revenue_type_ids: tuple[int, ...] = ()
    cost_of_sales_type_ids: tuple[int, ...] = ()


# (figure, mapping field, window, sign); credit balances are negated.
FIGURE_SOURCES = (
    ("current_assets", "current_asset_type_ids", BALANCE, 1),
    ("current_liabilities", "current_liability_type_ids", BALANCE, -1),
    ("cash", "cash_type_ids", BALANCE, 1),
    ("marketable_securities", "marketable_security_type_ids", BALANCE, 1),
    ("accounts_receivable", "receivable_type_ids", BALANCE, 1),
    ("inventory", "inventory_type_ids", BALANCE, 1),
    ("accounts_payable", "payable_type_ids", BALANCE, -1),
    ("cost_of_goods_sold", "cost_of_sales_type_ids", PERIOD, 1),
)


class WorkingCapitalService:
    """Service for computing working-capital figures and ratios."""

    def __init__(self, db: Database, walker: Optional[HierarchyWalker] = None):
        """Initialize working-capital service.

        Args:
            db: Database instance
            walker: Hierarchy walker (defaults to one over db)
        """
        self.db = db
        self.walker = walker or HierarchyWalker(db)

    def figures(
        self,
        start_date: date,
        end_date: date,
        mapping: WorkingCapitalMapping,
        dimensions: Optional[DimensionFilter] = None,
    ) -> WorkingCapitalFigures:
        """Read working-capital figures from the ledger.

        One aggregation query is issued per window (closing balance and
        period movement) for all mapped accounts together.

        Raises:
            NotFoundError: If a mapped type is not in the chart of accounts
        """
        chart = self.walker.build_chart()
        sources: dict[str, tuple[list[str], str, int]] = {}
        for figure, attribute, window_name, sign in FIGURE_SOURCES:
            codes = [
                code
                for type_node in select_types(chart, getattr(mapping, attribute))
                for code in type_node.account_codes()
            ]
            sources[figure] = (codes, window_name, sign)

        if mapping.revenue_type_ids:
            revenue_types = select_types(chart, mapping.revenue_type_ids)
            revenue_codes = [code for node in revenue_types for code in node.account_codes()]
        else:
            revenue_codes = self._class_codes(chart, ClassKind.INCOME)
        sources["revenue"] = (revenue_codes, PERIOD, -1)
        sources["total_assets"] = (self._class_codes(chart, ClassKind.ASSET), BALANCE, 1)

        windows = (
            TimeWindow(name=BALANCE, start=None, end=end_date),
            TimeWindow(name=PERIOD, start=start_date, end=end_date),
        )
        all_codes = [code for codes, _, _ in sources.values() for code in codes]
        balances = self.walker.aggregator.window_balances(all_codes, windows, dimensions)

        values = {
            figure: round_money(
                sign
                * sum((balances[code][window_name] for code in dict.fromkeys(codes)), Decimal("0"))
            )
            for figure, (codes, window_name, sign) in sources.items()
        }
        logger.debug("Working capital figures %s..%s: %s", start_date, end_date, values)
        return WorkingCapitalFigures(**values)

    def analyze(
        self,
        start_date: date,
        end_date: date,
        mapping: WorkingCapitalMapping,
        dimensions: Optional[DimensionFilter] = None,
    ) -> WorkingCapitalAnalysis:
        """Compute liquidity, efficiency and health status from the ledger."""
        return analyze_working_capital(self.figures(start_date, end_date, mapping, dimensions))

    def _class_codes(self, chart, kind: ClassKind) -> list[str]:
        return [
            code
            for class_node in chart
            if class_node.account_class.kind == kind
            for code in class_node.account_codes()
        ]
