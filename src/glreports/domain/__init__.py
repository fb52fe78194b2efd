"""Domain layer for glreports.

Services are resolved lazily because the database interface imports the
entities defined in this package.
"""

__all__ = [
    "HierarchyWalker",
    "JournalService",
    "LedgerAggregator",
    "ReportAssembler",
]


def __getattr__(name: str):
    if name == "HierarchyWalker":
        from glreports.domain.hierarchy import HierarchyWalker

        return HierarchyWalker
    if name == "JournalService":
        from glreports.domain.journal import JournalService

        return JournalService
    if name == "LedgerAggregator":
        from glreports.domain.ledger import LedgerAggregator

        return LedgerAggregator
    if name == "ReportAssembler":
        from glreports.domain.assembler import ReportAssembler

        return ReportAssembler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
