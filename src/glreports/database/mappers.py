"""Mapper functions to convert SQLAlchemy models into domain entities."""

from decimal import Decimal

from glreports.domain import entities as domain
from glreports.database.models import (
    ChartClass as ORMChartClass,
    ChartType as ORMChartType,
    ChartMaster as ORMChartMaster,
    GLTrans as ORMGLTrans,
    FiscalYear as ORMFiscalYear,
)
from glreports.domain.money import to_decimal


def account_class_to_domain(orm_class: ORMChartClass) -> domain.AccountClass:
    """Convert SQLAlchemy ChartClass model to domain AccountClass entity."""
    return domain.AccountClass(
        id=orm_class.id,
        name=orm_class.name,
        kind=domain.ClassKind(orm_class.kind),
    )


def account_type_to_domain(orm_type: ORMChartType) -> domain.AccountType:
    """Convert SQLAlchemy ChartType model to domain AccountType entity."""
    return domain.AccountType(
        id=orm_type.id,
        name=orm_type.name,
        class_id=orm_type.class_id,
        parent_id=orm_type.parent_id,
    )


def account_to_domain(orm_account: ORMChartMaster) -> domain.Account:
    """Convert SQLAlchemy ChartMaster model to domain Account entity."""
    return domain.Account(
        code=orm_account.account_code,
        name=orm_account.account_name,
        type_id=orm_account.type_id,
    )


def fiscal_year_to_domain(orm_year: ORMFiscalYear) -> domain.FiscalYear:
    """Convert SQLAlchemy FiscalYear model to domain FiscalYear entity."""
    return domain.FiscalYear(
        id=orm_year.id,
        begin=orm_year.begin,
        end=orm_year.end,
        closed=orm_year.closed,
    )


def gl_trans_to_row(orm_trans: ORMGLTrans, account_name: str = "") -> domain.LedgerRow:
    """Convert SQLAlchemy GLTrans model to a domain LedgerRow."""
    return domain.LedgerRow(
        type=orm_trans.type,
        type_no=orm_trans.type_no,
        tran_date=orm_trans.tran_date,
        account=orm_trans.account,
        amount=to_decimal(orm_trans.amount) if orm_trans.amount is not None else Decimal("0"),
        account_name=account_name or "",
        memo=orm_trans.memo or "",
        dimension_id=orm_trans.dimension_id or 0,
        dimension2_id=orm_trans.dimension2_id or 0,
        person_id=orm_trans.person_id,
        counter=orm_trans.counter,
    )
