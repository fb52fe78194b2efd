"""Aging of open receivable and payable items by days overdue."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from glreports.domain import errors
from glreports.domain.money import round_money, to_decimal
from glreports.domain.ratios import margin_percent

DEFAULT_AGING_BUCKETS = (30, 60, 90)

CURRENT_BUCKET = "current"


@dataclass(frozen=True)
class OpenItem:
    """Outstanding balance of one document."""

    key: str
    due_date: date
    amount: Decimal
    reference: str = ""


@dataclass(frozen=True)
class AgingReport:
    """Open items totalled per aging bucket, overall and per key."""

    as_of: date
    bucket_names: tuple[str, ...]
    totals: dict[str, Decimal]
    percentages: dict[str, Decimal]
    total_outstanding: Decimal
    by_key: dict[str, dict[str, Decimal]] = field(default_factory=dict)


def bucket_names(edges: Sequence[int] = DEFAULT_AGING_BUCKETS) -> tuple[str, ...]:
    """Return bucket names for the given upper edges, e.g. days_1_30."""
    names = [CURRENT_BUCKET]
    lower = 1
    for edge in edges:
        names.append(f"days_{lower}_{edge}")
        lower = edge + 1
    names.append(f"over_{edges[-1]}")
    return tuple(names)


def days_overdue(due_date: date, as_of: date) -> int:
    return (as_of - due_date).days


def bucket_for(days: int, edges: Sequence[int] = DEFAULT_AGING_BUCKETS) -> str:
    """Return the bucket a number of days overdue falls into."""
    names = bucket_names(edges)
    if days <= 0:
        return names[0]
    for index, edge in enumerate(edges, start=1):
        if days <= edge:
            return names[index]
    return names[-1]


def age_items(
    items: Iterable[OpenItem],
    as_of: date,
    edges: Sequence[int] = DEFAULT_AGING_BUCKETS,
) -> AgingReport:
    """Classify open items into aging buckets relative to an as-of date.

    Raises:
        ValidationError: If bucket edges are empty or not strictly increasing
    """
    edges = tuple(edges)
    if not edges or any(b <= a for a, b in zip(edges, edges[1:])) or edges[0] < 1:
        raise errors.ValidationError(f"Invalid aging bucket edges: {edges}")

    names = bucket_names(edges)
    totals = {name: Decimal("0") for name in names}
    by_key: dict[str, dict[str, Decimal]] = defaultdict(
        lambda: {name: Decimal("0") for name in names}
    )

    for item in items:
        bucket = bucket_for(days_overdue(item.due_date, as_of), edges)
        amount = to_decimal(item.amount)
        totals[bucket] += amount
        by_key[item.key][bucket] += amount

    total_outstanding = sum(totals.values(), Decimal("0"))
    return AgingReport(
        as_of=as_of,
        bucket_names=names,
        totals={name: round_money(value) for name, value in totals.items()},
        percentages={
            name: round_money(margin_percent(value, total_outstanding))
            for name, value in totals.items()
        },
        total_outstanding=round_money(total_outstanding),
        by_key={
            key: {name: round_money(value) for name, value in buckets.items()}
            for key, buckets in sorted(by_key.items())
        },
    )
