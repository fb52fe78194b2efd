"""Cash flow statement (indirect method) on top of the hierarchy walker.

Activities are pseudo-classes regrouping existing account types. Each one
reports the credit-positive movement of its accounts, which is their effect
on cash: a rise in receivables or a purchase of equipment is a debit and
shows as an outflow, new borrowing or share capital is a credit and shows
as an inflow. Net income is the credit-positive movement of every income
and expense account, so operating activities start from profit.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from glreports.domain import errors
from glreports.domain.entities import (
    AccountClass,
    AccountType,
    AggregateNode,
    ClassKind,
    DimensionFilter,
    TimeWindow,
)
from glreports.domain.hierarchy import ChartClassNode, ChartTypeNode, select_types
from glreports.domain.ledger import LedgerAggregator
from glreports.domain.money import round_money
from glreports.domain.ratios import variance_percent

logger = logging.getLogger(__name__)

OPERATING = "operating"
INVESTING = "investing"
FINANCING = "financing"
NET_CHANGE = "net_change"

NET_INCOME_TYPE_ID = 0

# Activities are displayed with the equity sign convention (credits positive).
ACTIVITY_KIND = ClassKind.EQUITY


@dataclass(frozen=True)
class CashFlowActivity:
    """One activity section and the account types whose movements it reports."""

    name: str
    label: str
    type_ids: tuple[int, ...] = ()
    include_net_income: bool = False


def build_activity_chart(
    chart: Sequence[ChartClassNode],
    activities: Sequence[CashFlowActivity],
    cash_types: Sequence[ChartTypeNode],
) -> list[ChartClassNode]:
    """Regroup a chart of accounts into one pseudo-class per activity.

    Raises:
        NotFoundError: If an activity names a type missing from the chart
        ValidationError: If an account would be reported in two sections or
            is both a cash account and an activity account
    """
    seen = {code for type_node in cash_types for code in type_node.account_codes()}
    sections = []
    for index, activity in enumerate(activities, start=1):
        types = []
        if activity.include_net_income:
            types.append(
                ChartTypeNode(
                    account_type=AccountType(NET_INCOME_TYPE_ID, "Net Income", index),
                    children=[
                        type_node
                        for class_node in chart
                        if not class_node.account_class.kind.is_balance_sheet
                        for type_node in class_node.types
                    ],
                )
            )
        types.extend(select_types(chart, activity.type_ids))

        for type_node in types:
            for code in type_node.account_codes():
                if code in seen:
                    raise errors.ValidationError(errors.account_reported_twice(code))
                seen.add(code)

        sections.append(
            ChartClassNode(
                account_class=AccountClass(index, activity.label, ACTIVITY_KIND),
                types=types,
            )
        )
    return sections


def position_windows(window: TimeWindow) -> tuple[TimeWindow, TimeWindow]:
    """Return the windows for cash held before and at the end of window."""
    opening = TimeWindow(
        name=f"{window.name}_opening",
        start=None,
        end=window.start,
        end_inclusive=False,
    )
    closing = TimeWindow(
        name=f"{window.name}_closing",
        start=None,
        end=window.end,
        end_inclusive=window.end_inclusive,
    )
    return opening, closing


def cash_positions(
    aggregator: LedgerAggregator,
    cash_codes: Sequence[str],
    windows: Sequence[TimeWindow],
    dimensions: Optional[DimensionFilter] = None,
) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
    """Return opening and closing cash per period window name."""
    pairs = {window.name: position_windows(window) for window in windows}
    position_list = [w for pair in pairs.values() for w in pair]
    balances = aggregator.window_balances(cash_codes, position_list, dimensions)

    def total(window_name: str) -> Decimal:
        return round_money(
            sum((balances[code][window_name] for code in dict.fromkeys(cash_codes)), Decimal("0"))
        )

    opening = {name: total(pair[0].name) for name, pair in pairs.items()}
    closing = {name: total(pair[1].name) for name, pair in pairs.items()}
    logger.debug("Cash positions opening=%s closing=%s", opening, closing)
    return opening, closing


def activity_variances(
    activities: Sequence[CashFlowActivity],
    sections: Sequence[AggregateNode],
    net_change: dict[str, Decimal],
    current: str,
    prior: str,
) -> dict[str, Decimal]:
    """Return the percentage change of each activity and of the net change."""
    variances = {
        activity.name: round_money(
            variance_percent(section.amounts[current], section.amounts[prior])
        )
        for activity, section in zip(activities, sections)
    }
    variances[NET_CHANGE] = round_money(variance_percent(net_change[current], net_change[prior]))
    return variances
