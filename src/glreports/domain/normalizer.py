"""Sign convention for reporting ledger sums by account class."""

from decimal import Decimal

from glreports.domain.entities import ClassKind

# Classes with a natural credit balance are negated for display.
SIGN_FACTORS: dict[ClassKind, int] = {
    ClassKind.ASSET: 1,
    ClassKind.LIABILITY: -1,
    ClassKind.EQUITY: -1,
    ClassKind.INCOME: -1,
    ClassKind.EXPENSE: 1,
}


def sign_factor(kind: ClassKind, enabled: bool = True) -> int:
    """Return the display multiplier for a class kind (+1 when disabled)."""
    if not enabled:
        return 1
    return SIGN_FACTORS[ClassKind(kind)]


def normalize(raw: Decimal, kind: ClassKind, enabled: bool = True) -> Decimal:
    """Convert a debit-positive ledger sum into its display sign."""
    return raw * sign_factor(kind, enabled)
