"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation


def parse_amount(amount_str: str) -> Decimal:
    """Parse a ledger amount string into a Decimal.

    Positive amounts are debits. Handles:
    - "123.45" and "-123.45"
    - "1,234.56"
    - "(123.45)" (credit in parentheses)
    - "123.45 Dr" / "123.45 Cr"

    Args:
        amount_str: Amount string

    Returns:
        Signed Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = False

    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]

    suffix = re.search(r"\s*(dr|cr)$", text, re.IGNORECASE)
    if suffix:
        negative = negative or suffix.group(1).lower() == "cr"
        text = text[: suffix.start()]

    text = re.sub(r"[$€£¥,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if negative else amount
