"""Report assembly driven by a single configuration value object.

Every report in the suite is one ReportConfig fed to ReportAssembler; the
presets below only choose windows, class kinds and flags.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from glreports.database.base import Database
from glreports.domain import cash_flow, errors, periods
from glreports.domain.cash_flow import CashFlowActivity
from glreports.domain.entities import (
    CashFlowSummary,
    ClassKind,
    ComparisonMode,
    DimensionFilter,
    ReportResult,
    ReportSummary,
    TimeWindow,
)
from glreports.domain.hierarchy import (
    HierarchyWalker,
    count_accounts,
    prune_immaterial,
    select_types,
)
from glreports.domain.journal import JournalService
from glreports.domain.money import MATERIALITY, is_material, round_money, within_tolerance
from glreports.domain.ratios import ACHIEVEMENT_CAP, achievement
from glreports.domain.working_capital import WorkingCapitalMapping, WorkingCapitalService

logger = logging.getLogger(__name__)

PROFIT_AND_LOSS_KINDS = (ClassKind.INCOME, ClassKind.EXPENSE)
BALANCE_SHEET_KINDS = (ClassKind.ASSET, ClassKind.LIABILITY, ClassKind.EQUITY)


class ReportStyle(str, Enum):
    """Pipeline a report runs through."""

    HIERARCHY = "hierarchy"
    JOURNAL = "journal"
    ACCOUNT_LEDGER = "account-ledger"
    CASH_FLOW = "cash-flow"
    WORKING_CAPITAL = "working-capital"


@dataclass(frozen=True)
class ReportConfig:
    """Everything that distinguishes one report from another."""

    report_key: str
    title: str
    style: ReportStyle = ReportStyle.HIERARCHY
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    comparison: ComparisonMode = ComparisonMode.NONE
    class_kinds: Optional[tuple[ClassKind, ...]] = None
    sign_convention: bool = True
    suppress_zero: bool = True
    dimensions: DimensionFilter = field(default_factory=DimensionFilter)
    year_begin: Optional[date] = None
    fiscal_start_month: int = 1
    fiscal_year_id: Optional[int] = None
    divisor: Decimal = Decimal("1")
    trans_type: Optional[int] = None
    show_total: bool = False
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    materiality: Decimal = MATERIALITY
    achievement_cap: Decimal = ACHIEVEMENT_CAP
    activities: tuple[CashFlowActivity, ...] = ()
    cash_type_ids: tuple[int, ...] = ()
    working_capital: Optional[WorkingCapitalMapping] = None


def trial_balance(
    start_date: date,
    end_date: date,
    include_zero: bool = False,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Brought-forward, period and total balances of every account, debit-positive."""
    return ReportConfig(
        report_key="trial_balance",
        title="Trial Balance",
        start_date=start_date,
        end_date=end_date,
        comparison=ComparisonMode.BALANCES,
        sign_convention=False,
        suppress_zero=not include_zero,
        dimensions=dimensions or DimensionFilter(),
    )


def profit_and_loss(
    start_date: date,
    end_date: date,
    compare: ComparisonMode = ComparisonMode.ACCUMULATED,
    year_begin: Optional[date] = None,
    fiscal_start_month: int = 1,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Income and expense classes with an achievement comparison column."""
    if compare not in periods.COMPARISON_WINDOWS:
        raise errors.ValidationError(f"Unsupported profit and loss comparison: {compare}")
    return ReportConfig(
        report_key="profit_and_loss",
        title="Profit and Loss Statement",
        start_date=start_date,
        end_date=end_date,
        comparison=compare,
        class_kinds=PROFIT_AND_LOSS_KINDS,
        year_begin=year_begin,
        fiscal_start_month=fiscal_start_month,
        dimensions=dimensions or DimensionFilter(),
    )


def balance_sheet(
    start_date: date,
    end_date: date,
    include_zero: bool = False,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Opening, period and closing balances of asset, liability and equity classes."""
    return ReportConfig(
        report_key="balance_sheet",
        title="Balance Sheet",
        start_date=start_date,
        end_date=end_date,
        comparison=ComparisonMode.BALANCES,
        class_kinds=BALANCE_SHEET_KINDS,
        suppress_zero=not include_zero,
        dimensions=dimensions or DimensionFilter(),
    )


def annual_expense_breakdown(
    fiscal_year_id: Optional[int] = None,
    end_date: Optional[date] = None,
    in_thousands: bool = False,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Twelve monthly columns plus a total for income and expense accounts."""
    if fiscal_year_id is None and end_date is None:
        raise errors.ValidationError("A fiscal year or an end date is required")
    return ReportConfig(
        report_key="annual_expense_breakdown",
        title="Annual Expense Breakdown",
        end_date=end_date,
        comparison=ComparisonMode.ROLLING_12_MONTH,
        class_kinds=PROFIT_AND_LOSS_KINDS,
        fiscal_year_id=fiscal_year_id,
        divisor=Decimal("1000") if in_thousands else Decimal("1"),
        dimensions=dimensions or DimensionFilter(),
    )


def journal_entries(
    start_date: date,
    end_date: date,
    trans_type: Optional[int] = None,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Ledger rows of a period grouped into transactions."""
    return ReportConfig(
        report_key="journal_entries",
        title="Journal Entries",
        style=ReportStyle.JOURNAL,
        start_date=start_date,
        end_date=end_date,
        trans_type=trans_type,
        dimensions=dimensions or DimensionFilter(),
    )


def audit_trail(
    start_date: date,
    end_date: date,
    trans_type: Optional[int] = None,
) -> ReportConfig:
    """Transactions of a period; a debit total is shown when filtered by type."""
    return ReportConfig(
        report_key="audit_trail",
        title="Audit Trail",
        style=ReportStyle.JOURNAL,
        start_date=start_date,
        end_date=end_date,
        trans_type=trans_type,
        show_total=trans_type is not None,
    )


def account_transactions(
    start_date: date,
    end_date: date,
    from_account: Optional[str] = None,
    to_account: Optional[str] = None,
    fiscal_start_month: int = 1,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Per-account listings with opening, running and closing balances."""
    return ReportConfig(
        report_key="gl_account_transactions",
        title="GL Account Transactions",
        style=ReportStyle.ACCOUNT_LEDGER,
        start_date=start_date,
        end_date=end_date,
        from_account=from_account,
        to_account=to_account,
        fiscal_start_month=fiscal_start_month,
        dimensions=dimensions or DimensionFilter(),
    )


def cash_flow_statement(
    start_date: date,
    end_date: date,
    cash_type_ids: tuple[int, ...],
    operating_type_ids: tuple[int, ...] = (),
    investing_type_ids: tuple[int, ...] = (),
    financing_type_ids: tuple[int, ...] = (),
    compare_prior_year: bool = False,
    include_zero: bool = False,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Operating, investing and financing cash movements by the indirect method.

    Operating activities start from net income and add the movement of the
    operating types, which are balance sheet types such as receivables,
    payables and accumulated depreciation.
    """
    if not cash_type_ids:
        raise errors.ValidationError("At least one cash account type is required")
    return ReportConfig(
        report_key="cash_flow_statement",
        title="Cash Flow Statement",
        style=ReportStyle.CASH_FLOW,
        start_date=start_date,
        end_date=end_date,
        comparison=ComparisonMode.PRIOR_YEAR if compare_prior_year else ComparisonMode.NONE,
        suppress_zero=not include_zero,
        dimensions=dimensions or DimensionFilter(),
        activities=(
            CashFlowActivity(
                cash_flow.OPERATING,
                "Operating Activities",
                tuple(operating_type_ids),
                include_net_income=True,
            ),
            CashFlowActivity(cash_flow.INVESTING, "Investing Activities", tuple(investing_type_ids)),
            CashFlowActivity(cash_flow.FINANCING, "Financing Activities", tuple(financing_type_ids)),
        ),
        cash_type_ids=tuple(cash_type_ids),
    )


def working_capital_analysis(
    start_date: date,
    end_date: date,
    mapping: WorkingCapitalMapping,
    dimensions: Optional[DimensionFilter] = None,
) -> ReportConfig:
    """Liquidity ratios, days outstanding and health status from ledger balances."""
    if not mapping.current_asset_type_ids or not mapping.current_liability_type_ids:
        raise errors.ValidationError("Current asset and current liability types are required")
    return ReportConfig(
        report_key="working_capital_analysis",
        title="Working Capital Analysis",
        style=ReportStyle.WORKING_CAPITAL,
        start_date=start_date,
        end_date=end_date,
        dimensions=dimensions or DimensionFilter(),
        working_capital=mapping,
    )


class ReportAssembler:
    """Service for generating any report from its configuration."""

    def __init__(self, db: Database):
        """Initialize report assembler.

        Args:
            db: Database instance
        """
        self.db = db
        self.walker = HierarchyWalker(db)
        self.journal_service = JournalService(db)
        self.working_capital_service = WorkingCapitalService(db, self.walker)

    def generate(self, config: ReportConfig) -> ReportResult:
        """Generate a report.

        Raises:
            InvalidRangeError: If the configured dates are reversed or out of bounds
            CyclicHierarchyError: If the account type hierarchy contains a cycle
        """
        logger.info(
            "Generating %s report (%s..%s, comparison=%s, dimensions=%s/%s)",
            config.report_key,
            config.start_date,
            config.end_date,
            config.comparison.value,
            config.dimensions.dimension_id,
            config.dimensions.dimension2_id,
        )
        if config.style == ReportStyle.JOURNAL:
            return self._journal_report(config)
        if config.style == ReportStyle.ACCOUNT_LEDGER:
            return self._account_ledger_report(config)
        if config.style == ReportStyle.CASH_FLOW:
            return self._cash_flow_report(config)
        if config.style == ReportStyle.WORKING_CAPITAL:
            return self._working_capital_report(config)
        return self._hierarchy_report(config)

    def resolve_windows(self, config: ReportConfig) -> tuple[TimeWindow, ...]:
        """Compute the named windows a hierarchy report aggregates over."""
        if config.comparison == ComparisonMode.ROLLING_12_MONTH:
            end = config.end_date
            if config.fiscal_year_id is not None:
                fiscal_year = self.db.get_fiscal_year(config.fiscal_year_id)
                if fiscal_year is None:
                    raise errors.NotFoundError(errors.fiscal_year_not_found(config.fiscal_year_id))
                end = fiscal_year.end
            if end is None:
                raise errors.InvalidRangeError("A fiscal year or an end date is required")
            return periods.build_windows(
                config.comparison, fiscal_year_end=(end.year, end.month)
            )

        year_begin = config.year_begin
        if config.comparison == ComparisonMode.ACCUMULATED and year_begin is None:
            periods.validate_range(config.start_date, config.end_date)
            fiscal_year = self.db.find_fiscal_year(config.end_date)
            if fiscal_year is not None:
                year_begin = fiscal_year.begin
        return periods.build_windows(
            config.comparison,
            config.start_date,
            config.end_date,
            year_begin=year_begin,
            fiscal_start_month=config.fiscal_start_month,
        )

    def _hierarchy_report(self, config: ReportConfig) -> ReportResult:
        windows = self.resolve_windows(config)
        comparison = None
        comparison_window = periods.COMPARISON_WINDOWS.get(config.comparison)
        if comparison_window is not None:
            comparison = (periods.CURRENT, comparison_window)

        result = self.walker.walk(
            windows,
            kinds=config.class_kinds,
            dimensions=config.dimensions,
            sign_convention=config.sign_convention,
            divisor=config.divisor,
            comparison=comparison,
            materiality=config.materiality,
            achievement_cap=config.achievement_cap,
        )
        tree = prune_immaterial(result.nodes) if config.suppress_zero else result.nodes

        achieved = None
        if comparison is not None:
            achieved = round_money(
                achievement(
                    result.amounts[comparison[0]],
                    result.amounts[comparison[1]],
                    config.achievement_cap,
                )
            )

        summary = ReportSummary(
            amounts=dict(result.amounts),
            is_balanced=not any(
                is_material(value, config.materiality) for value in result.raw_totals.values()
            ),
            account_count=count_accounts(tree),
            achieved_percent=achieved,
            net_amounts={
                name: round_money(-value / config.divisor)
                for name, value in result.raw_totals.items()
            },
        )
        logger.debug(
            "%s: %d accounts shown, balanced=%s",
            config.report_key,
            summary.account_count,
            summary.is_balanced,
        )

        start_date = config.start_date
        end_date = config.end_date
        if config.comparison == ComparisonMode.ROLLING_12_MONTH:
            start_date = windows[-1].start
            end_date = windows[-1].end - timedelta(days=1)

        return ReportResult(
            title=config.title,
            report_key=config.report_key,
            start_date=start_date,
            end_date=end_date,
            windows=windows,
            tree=tree,
            summary=summary,
        )

    def _cash_flow_report(self, config: ReportConfig) -> ReportResult:
        windows = self.resolve_windows(config)
        chart = self.walker.build_chart()
        cash_types = select_types(chart, config.cash_type_ids)
        sections = cash_flow.build_activity_chart(chart, config.activities, cash_types)

        result = self.walker.walk(
            windows,
            chart=sections,
            dimensions=config.dimensions,
            materiality=config.materiality,
        )
        tree = prune_immaterial(result.nodes) if config.suppress_zero else result.nodes

        cash_codes = [code for type_node in cash_types for code in type_node.account_codes()]
        opening, closing = cash_flow.cash_positions(
            self.walker.aggregator, cash_codes, windows, config.dimensions
        )
        net_change = dict(result.amounts)
        reconciled = all(
            within_tolerance(opening[name] + net_change[name], closing[name], config.materiality)
            for name in net_change
        )

        variances = {}
        if config.comparison == ComparisonMode.PRIOR_YEAR:
            variances = cash_flow.activity_variances(
                config.activities, result.nodes, net_change, periods.CURRENT, periods.PRIOR_YEAR
            )
        if not reconciled:
            logger.warning(
                "%s: cash does not reconcile (opening=%s, change=%s, closing=%s)",
                config.report_key,
                opening,
                net_change,
                closing,
            )

        return ReportResult(
            title=config.title,
            report_key=config.report_key,
            start_date=config.start_date,
            end_date=config.end_date,
            windows=windows,
            tree=tree,
            summary=ReportSummary(
                amounts=net_change,
                is_balanced=reconciled,
                account_count=count_accounts(tree),
            ),
            cash_flow=CashFlowSummary(
                opening_cash=opening,
                net_change=net_change,
                closing_cash=closing,
                is_reconciled=reconciled,
                variance_percent=variances,
            ),
        )

    def _working_capital_report(self, config: ReportConfig) -> ReportResult:
        periods.validate_range(config.start_date, config.end_date)
        analysis = self.working_capital_service.analyze(
            config.start_date, config.end_date, config.working_capital, config.dimensions
        )
        logger.debug("%s: health %s", config.report_key, analysis.health_status)
        return ReportResult(
            title=config.title,
            report_key=config.report_key,
            start_date=config.start_date,
            end_date=config.end_date,
            working_capital=analysis,
        )

    def _journal_report(self, config: ReportConfig) -> ReportResult:
        periods.validate_range(config.start_date, config.end_date)
        transactions, summary = self.journal_service.journal(
            config.start_date,
            config.end_date,
            trans_type=config.trans_type,
            dimensions=config.dimensions,
            tolerance=config.materiality,
        )
        return ReportResult(
            title=config.title,
            report_key=config.report_key,
            start_date=config.start_date,
            end_date=config.end_date,
            transactions=tuple(transactions),
            journal_summary=summary,
            total_amount=summary.total_debit if config.show_total else None,
        )

    def _account_ledger_report(self, config: ReportConfig) -> ReportResult:
        periods.validate_range(config.start_date, config.end_date)
        kind_by_type: dict[int, ClassKind] = {}
        ledgers = []

        for account in self.db.list_accounts(config.from_account, config.to_account):
            kind = self._class_kind(account.type_id, kind_by_type)
            opening_from = None
            if kind is not None and not kind.is_balance_sheet:
                opening_from = self._year_begin(config)

            ledger = self.journal_service.account_ledger(
                account.code,
                config.start_date,
                config.end_date,
                opening_from=opening_from,
                dimensions=config.dimensions,
            )
            if ledger.opening_balance == 0 and not ledger.lines:
                continue
            ledgers.append(ledger)

        return ReportResult(
            title=config.title,
            report_key=config.report_key,
            start_date=config.start_date,
            end_date=config.end_date,
            account_ledgers=tuple(ledgers),
        )

    def _year_begin(self, config: ReportConfig) -> date:
        if config.year_begin is not None:
            return config.year_begin
        fiscal_year = self.db.find_fiscal_year(config.start_date)
        if fiscal_year is not None:
            return fiscal_year.begin
        return periods.fiscal_year_begin(config.start_date, config.fiscal_start_month)

    def _class_kind(
        self, type_id: int, cache: dict[int, ClassKind]
    ) -> Optional[ClassKind]:
        if type_id not in cache:
            account_type = self.db.get_account_type(type_id)
            if account_type is None:
                return None
            account_class = self.db.get_account_class(account_type.class_id)
            if account_class is None:
                return None
            cache[type_id] = account_class.kind
        return cache[type_id]
