"""SQLAlchemy models for the general-ledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class ChartClass(Base):
    """Account class model (assets, liabilities, ...)."""

    __tablename__ = "chart_class"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    kind = Column(Integer, nullable=False)

    # Relationships
    types = relationship("ChartType", back_populates="account_class")


class ChartType(Base):
    """Account type model with hierarchical structure."""

    __tablename__ = "chart_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    class_id = Column(Integer, ForeignKey("chart_class.id"), nullable=False)
    parent_id = Column(Integer, ForeignKey("chart_types.id"), nullable=True)

    # Relationships
    account_class = relationship("ChartClass", back_populates="types")
    parent = relationship("ChartType", remote_side=[id], backref="children")
    accounts = relationship("ChartMaster", back_populates="account_type")


class ChartMaster(Base):
    """Ledger account model."""

    __tablename__ = "chart_master"

    account_code = Column(String, primary_key=True)
    account_name = Column(String, nullable=False)
    type_id = Column(Integer, ForeignKey("chart_types.id"), nullable=False)
    inactive = Column(Boolean, default=False, nullable=False)

    # Relationships
    account_type = relationship("ChartType", back_populates="accounts")


class GLTrans(Base):
    """General-ledger entry model. Positive amounts are debits."""

    __tablename__ = "gl_trans"

    counter = Column(Integer, primary_key=True)
    type = Column(Integer, nullable=False)
    type_no = Column(Integer, nullable=False)
    tran_date = Column(Date, nullable=False)
    account = Column(String, ForeignKey("chart_master.account_code"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    memo = Column(String, nullable=True)
    dimension_id = Column(Integer, default=0, nullable=False)
    dimension2_id = Column(Integer, default=0, nullable=False)
    person_id = Column(String, nullable=True)
    posted_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_gl_trans_account_date", "account", "tran_date"),
        Index("ix_gl_trans_type_no", "type", "type_no"),
    )


class BudgetTrans(Base):
    """Budget entry model."""

    __tablename__ = "budget_trans"

    id = Column(Integer, primary_key=True)
    tran_date = Column(Date, nullable=False)
    account = Column(String, ForeignKey("chart_master.account_code"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    dimension_id = Column(Integer, default=0, nullable=False)
    dimension2_id = Column(Integer, default=0, nullable=False)

    __table_args__ = (Index("ix_budget_trans_account_date", "account", "tran_date"),)


class FiscalYear(Base):
    """Fiscal year model."""

    __tablename__ = "fiscal_year"

    id = Column(Integer, primary_key=True)
    begin = Column(Date, nullable=False)
    end = Column(Date, nullable=False)
    closed = Column(Boolean, default=False, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
