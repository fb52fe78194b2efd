"""Chart-of-accounts hierarchy building and aggregation."""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from glreports.database.base import Database
from glreports.domain import errors
from glreports.domain.entities import (
    Account,
    AccountClass,
    AccountType,
    AggregateNode,
    ClassKind,
    DimensionFilter,
    NodeKind,
    TimeWindow,
)
from glreports.domain.ledger import LedgerAggregator
from glreports.domain.money import MATERIALITY, is_material, round_money
from glreports.domain.normalizer import sign_factor
from glreports.domain.ratios import ACHIEVEMENT_CAP, achievement

logger = logging.getLogger(__name__)


@dataclass
class ChartTypeNode:
    """Account type with its accounts and owned sub-types."""

    account_type: AccountType
    accounts: list[Account] = field(default_factory=list)
    children: list["ChartTypeNode"] = field(default_factory=list)

    def account_codes(self) -> list[str]:
        codes = [account.code for account in self.accounts]
        for child in self.children:
            codes.extend(child.account_codes())
        return codes


@dataclass
class ChartClassNode:
    """Account class with its top-level types."""

    account_class: AccountClass
    types: list[ChartTypeNode] = field(default_factory=list)

    def account_codes(self) -> list[str]:
        codes: list[str] = []
        for type_node in self.types:
            codes.extend(type_node.account_codes())
        return codes


@dataclass
class _Partial:
    """Unrounded node amounts before finalization."""

    id: str
    label: str
    kind: NodeKind
    amounts: dict[str, Decimal]
    children: list["_Partial"] = field(default_factory=list)
    code: Optional[str] = None


@dataclass(frozen=True)
class WalkResult:
    """Aggregated tree plus the debit-positive grand totals it was built from."""

    nodes: tuple[AggregateNode, ...]
    amounts: dict[str, Decimal]
    raw_totals: dict[str, Decimal]


class HierarchyWalker:
    """Service for aggregating ledger balances over the chart of accounts."""

    def __init__(self, db: Database, aggregator: Optional[LedgerAggregator] = None):
        """Initialize hierarchy walker.

        Args:
            db: Database instance used as the chart-of-accounts catalog
            aggregator: Ledger aggregator (defaults to one over db)
        """
        self.db = db
        self.aggregator = aggregator or LedgerAggregator(db)

    def build_chart(self, kinds: Optional[Iterable[ClassKind]] = None) -> list[ChartClassNode]:
        """Build the class > type > sub-type > account tree once for a run.

        Raises:
            CyclicHierarchyError: If a type is reached twice
        """
        visited: set[int] = set()
        chart = []
        for account_class in self.db.fetch_classes(kinds):
            class_node = ChartClassNode(account_class=account_class)
            for account_type in self.db.fetch_types(account_class.id, None):
                class_node.types.append(
                    self._build_type(account_class.id, account_type, visited)
                )
            chart.append(class_node)
        logger.debug("Built chart with %d classes and %d types", len(chart), len(visited))
        return chart

    def _build_type(
        self, class_id: int, account_type: AccountType, visited: set[int]
    ) -> ChartTypeNode:
        if account_type.id in visited:
            raise errors.CyclicHierarchyError(errors.cyclic_type(account_type.id))
        visited.add(account_type.id)

        node = ChartTypeNode(
            account_type=account_type,
            accounts=list(self.db.fetch_accounts(account_type.id)),
        )
        for child in self.db.fetch_types(class_id, account_type.id):
            node.children.append(self._build_type(class_id, child, visited))
        return node

    def walk(
        self,
        windows: Sequence[TimeWindow],
        *,
        kinds: Optional[Iterable[ClassKind]] = None,
        chart: Optional[list[ChartClassNode]] = None,
        dimensions: Optional[DimensionFilter] = None,
        sign_convention: bool = True,
        divisor: Decimal = Decimal("1"),
        comparison: Optional[tuple[str, str]] = None,
        materiality: Decimal = MATERIALITY,
        achievement_cap: Decimal = ACHIEVEMENT_CAP,
    ) -> WalkResult:
        """Aggregate ledger balances into a tree of class, type and account nodes.

        Args:
            windows: Windows to aggregate each account over
            kinds: Optional class kinds to restrict the chart to
            chart: Prebuilt chart (built from the catalog when omitted)
            dimensions: Optional dimension filter
            sign_convention: Apply the class sign convention at the leaves
            divisor: Divide every leaf amount by this (e.g. 1000)
            comparison: (period window, comparison window) names used for
                achievement percentages
            materiality: Threshold for has_material_balance
            achievement_cap: Cap for achievement percentages

        Returns:
            WalkResult with the full, unpruned tree
        """
        if chart is None:
            chart = self.build_chart(kinds)

        codes = [code for class_node in chart for code in class_node.account_codes()]
        balances = self.aggregator.window_balances(codes, windows, dimensions)
        window_names = [window.name for window in windows]

        raw_totals = {name: Decimal("0") for name in window_names}
        for code in dict.fromkeys(codes):
            for name in window_names:
                raw_totals[name] += balances[code][name]

        partials = []
        for class_node in chart:
            factor = Decimal(sign_factor(class_node.account_class.kind, sign_convention))
            scale = factor / divisor
            children = [
                self._aggregate_type(type_node, balances, window_names, scale)
                for type_node in class_node.types
            ]
            partials.append(
                _Partial(
                    id=f"class:{class_node.account_class.id}",
                    label=class_node.account_class.name,
                    kind=NodeKind.CLASS,
                    amounts=self._sum_amounts(children, window_names),
                    children=children,
                )
            )

        nodes = tuple(
            self._finalize(partial, comparison, materiality, achievement_cap)
            for partial in partials
        )
        grand = sum_node_amounts(nodes, window_names)
        return WalkResult(nodes=nodes, amounts=grand, raw_totals=raw_totals)

    def _aggregate_type(
        self,
        type_node: ChartTypeNode,
        balances: dict[str, dict[str, Decimal]],
        window_names: list[str],
        scale: Decimal,
    ) -> _Partial:
        children = [
            _Partial(
                id=f"account:{account.code}",
                label=account.name,
                kind=NodeKind.ACCOUNT,
                amounts={name: balances[account.code][name] * scale for name in window_names},
                code=account.code,
            )
            for account in type_node.accounts
        ]
        children.extend(
            self._aggregate_type(child, balances, window_names, scale)
            for child in type_node.children
        )
        return _Partial(
            id=f"type:{type_node.account_type.id}",
            label=type_node.account_type.name,
            kind=NodeKind.TYPE,
            amounts=self._sum_amounts(children, window_names),
            children=children,
        )

    def _sum_amounts(self, partials: list[_Partial], window_names: list[str]) -> dict[str, Decimal]:
        return {
            name: sum((partial.amounts[name] for partial in partials), Decimal("0"))
            for name in window_names
        }

    def _finalize(
        self,
        partial: _Partial,
        comparison: Optional[tuple[str, str]],
        materiality: Decimal,
        achievement_cap: Decimal,
    ) -> AggregateNode:
        """Round leaves once; every parent is the exact sum of its rounded children."""
        children = tuple(
            self._finalize(child, comparison, materiality, achievement_cap)
            for child in partial.children
        )
        if partial.kind == NodeKind.ACCOUNT:
            amounts = {name: round_money(value) for name, value in partial.amounts.items()}
        else:
            amounts = sum_node_amounts(children, list(partial.amounts))

        achieved = None
        if comparison is not None:
            period_name, comparison_name = comparison
            achieved = round_money(
                achievement(
                    partial.amounts[period_name],
                    partial.amounts[comparison_name],
                    achievement_cap,
                )
            )
        return AggregateNode(
            id=partial.id,
            label=partial.label,
            kind=partial.kind,
            amounts=amounts,
            children=children,
            has_material_balance=any(is_material(value, materiality) for value in amounts.values()),
            achieved_percent=achieved,
            code=partial.code,
        )


def select_types(chart: Iterable[ChartClassNode], type_ids: Iterable[int]) -> list[ChartTypeNode]:
    """Return the type subtrees with the given ids, in the order requested.

    Raises:
        NotFoundError: If a type id is not part of the chart
    """
    by_id: dict[int, ChartTypeNode] = {}
    pending = [type_node for class_node in chart for type_node in class_node.types]
    while pending:
        type_node = pending.pop()
        by_id[type_node.account_type.id] = type_node
        pending.extend(type_node.children)

    selected = []
    for type_id in type_ids:
        if type_id not in by_id:
            raise errors.NotFoundError(errors.account_type_not_found(type_id))
        selected.append(by_id[type_id])
    return selected


def sum_node_amounts(
    nodes: Iterable[AggregateNode], window_names: Sequence[str]
) -> dict[str, Decimal]:
    """Sum finalized node amounts per window; sums of cents need no rounding."""
    totals = {name: Decimal("0.00") for name in window_names}
    for node in nodes:
        for name in window_names:
            totals[name] += node.amounts[name]
    return totals


def prune_immaterial(nodes: Iterable[AggregateNode]) -> tuple[AggregateNode, ...]:
    """Drop nodes with no material balance anywhere in their subtree.

    Only the returned structure changes; amounts already summed into
    ancestors are left as they are.
    """
    kept = []
    for node in nodes:
        children = prune_immaterial(node.children)
        if node.has_material_balance or children:
            kept.append(replace(node, children=children))
    return tuple(kept)


def count_accounts(nodes: Iterable[AggregateNode]) -> int:
    """Count account leaves in a tree."""
    total = 0
    for node in nodes:
        if node.kind == NodeKind.ACCOUNT:
            total += 1
        total += count_accounts(node.children)
    return total


def iter_nodes(nodes: Iterable[AggregateNode]):
    """Yield every node of a tree depth first."""
    for node in nodes:
        yield node
        yield from iter_nodes(node.children)
