"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidRangeError(ValidationError):
    """Date range is reversed or a fiscal year is outside supported bounds."""


class CyclicHierarchyError(DomainError):
    """Account type hierarchy contains a cycle."""


def reversed_range(start, end) -> str:
    """Return message for an end date before its start date."""
    return f"Invalid date range: end date {end} is before start date {start}"


def fiscal_year_out_of_bounds(year: int, month: int) -> str:
    """Return message for an unsupported fiscal year end."""
    return f"Fiscal year end {year}-{month:02d} is outside supported bounds"


def cyclic_type(type_id: int) -> str:
    """Return message for a type reached twice while walking the hierarchy."""
    return f"Account type {type_id} appears more than once in the type hierarchy"


def account_class_not_found(class_id: int) -> str:
    """Return message for missing account class."""
    return f"Account class {class_id} not found"


def account_type_not_found(type_id: int) -> str:
    """Return message for missing account type."""
    return f"Account type {type_id} not found"


def account_not_found(account_code: str) -> str:
    """Return message for missing account."""
    return f"Account '{account_code}' not found"


def fiscal_year_not_found(fiscal_year_id: int) -> str:
    """Return message for missing fiscal year."""
    return f"Fiscal year {fiscal_year_id} not found"


def duplicate_account(account_code: str) -> str:
    """Return message for an account code that already exists."""
    return f"Account with code '{account_code}' already exists"


def account_reported_twice(account_code: str) -> str:
    """Return message for an account mapped to more than one report section."""
    return f"Account '{account_code}' is mapped to more than one section"
