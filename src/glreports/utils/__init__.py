"""Utility functions for glreports."""

from glreports.utils.date_parser import parse_date, get_date_range
from glreports.utils.amount_parser import parse_amount

__all__ = ["parse_date", "get_date_range", "parse_amount"]
