"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean, Float,
    Numeric, Date, ForeignKey, Enum as SQLEnum,
    Index, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from lexbill.domain.models.invoice import InvoiceStatus, PaymentMethod
from lexbill.domain.models.expense import ExpenseStatus

from .database import Base


def _enum_column(enum_class):
    """Store enum values rather than member names."""
    return SQLEnum(enum_class, values_callable=lambda members: [member.value for member in members])


def Money():
    return Numeric(12, 2, asdecimal=False)


class UserModel(Base):
    """Firm member recording time"""
    __tablename__ = 'users'

    id = Column(String(64), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255))

    time_entries = relationship("TimeEntryModel", back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ClientModel(Base):
    """Client table"""
    __tablename__ = 'clients'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    company = Column(String(255))
    is_deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    cases = relationship("CaseModel", back_populates="client")
    invoices = relationship("InvoiceModel", back_populates="client")


class CaseModel(Base):
    """Case table"""
    __tablename__ = 'cases'

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey('clients.id'), nullable=False)
    case_number = Column(String(20), nullable=False, unique=True)
    title = Column(String(255), nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    client = relationship("ClientModel", back_populates="cases")

    __table_args__ = (
        Index('idx_cases_client', 'client_id'),
    )


class InvoiceModel(Base):
    """Invoice table"""
    __tablename__ = 'invoices'

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey('clients.id'), nullable=False)
    case_id = Column(Integer, ForeignKey('cases.id'))

    # Invoice details
    invoice_number = Column(String(50), nullable=False)
    status = Column(_enum_column(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT)

    # Amounts
    subtotal = Column(Money(), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    tax_amount = Column(Money(), nullable=False, default=0)
    discount = Column(Money(), nullable=False, default=0)
    total = Column(Money(), nullable=False, default=0)
    amount_paid = Column(Money(), nullable=False, default=0)
    balance = Column(Money(), nullable=False, default=0)

    # Dates
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    sent_date = Column(Date)

    # Content
    notes = Column(Text)
    terms = Column(Text)

    is_deleted = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(64))
    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    client = relationship("ClientModel", back_populates="invoices")
    case = relationship("CaseModel")
    items = relationship(
        "InvoiceItemModel",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItemModel.position"
    )
    payments = relationship(
        "PaymentModel",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="PaymentModel.position"
    )

    # Constraints and indexes
    __table_args__ = (
        UniqueConstraint('invoice_number', name='unique_invoice_number'),
        Index('idx_invoices_client_case', 'client_id', 'case_id'),
        Index('idx_invoices_status', 'status'),
        Index('idx_invoices_dates', 'issue_date', 'due_date'),
        CheckConstraint('balance >= 0', name='invoice_balance_non_negative'),
    )


class InvoiceItemModel(Base):
    """Invoice line item table"""
    __tablename__ = 'invoice_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id'), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    rate = Column(Float, nullable=False, default=0)
    amount = Column(Money(), nullable=False)
    time_entry_id = Column(Integer, ForeignKey('time_entries.id'))
    expense_id = Column(Integer, ForeignKey('expenses.id'))
    case_id = Column(Integer, ForeignKey('cases.id'))
    taxable = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)

    # Relationships
    invoice = relationship("InvoiceModel", back_populates="items")


class PaymentModel(Base):
    """Payment ledger table"""
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id'), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    amount = Column(Money(), nullable=False)
    payment_date = Column(Date, nullable=False)
    method = Column(_enum_column(PaymentMethod), nullable=False)
    reference = Column(String(255))
    notes = Column(Text)
    recorded_by = Column(String(64), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    invoice = relationship("InvoiceModel", back_populates="payments")

    __table_args__ = (
        Index('idx_payments_invoice', 'invoice_id'),
        Index('idx_payments_date', 'payment_date'),
    )


class TimeEntryModel(Base):
    """Time entry table"""
    __tablename__ = 'time_entries'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False)
    case_id = Column(Integer, ForeignKey('cases.id'))
    client_id = Column(Integer, ForeignKey('clients.id'))
    task_id = Column(Integer)

    description = Column(Text, nullable=False)
    entry_date = Column(Date, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=0)

    # Billing
    billable = Column(Boolean, nullable=False, default=True)
    billing_rate = Column(Money(), nullable=False, default=0)
    billable_amount = Column(Money(), nullable=False, default=0)

    # Invoicing
    invoiced = Column(Boolean, nullable=False, default=False)
    invoice_id = Column(Integer, ForeignKey('invoices.id'))

    is_deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("UserModel", back_populates="time_entries")
    case = relationship("CaseModel")

    __table_args__ = (
        Index('idx_time_entries_unbilled', 'client_id', 'billable', 'invoiced'),
        Index('idx_time_entries_case', 'case_id'),
        Index('idx_time_entries_invoice', 'invoice_id'),
        CheckConstraint('duration_minutes >= 0', name='time_entry_duration_non_negative'),
    )


class ExpenseModel(Base):
    """Expense table"""
    __tablename__ = 'expenses'

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(Text, nullable=False)
    amount = Column(Money(), nullable=False)
    expense_date = Column(Date, nullable=False)
    submitted_by = Column(String(64), nullable=False)
    client_id = Column(Integer, ForeignKey('clients.id'))
    case_id = Column(Integer, ForeignKey('cases.id'))
    status = Column(_enum_column(ExpenseStatus), nullable=False, default=ExpenseStatus.PENDING)

    # Billing
    billable = Column(Boolean, nullable=False, default=True)
    markup_percentage = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    billable_amount = Column(Money(), nullable=False, default=0)

    # Invoicing
    invoiced = Column(Boolean, nullable=False, default=False)
    invoice_id = Column(Integer, ForeignKey('invoices.id'))

    is_deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index('idx_expenses_unbilled', 'client_id', 'billable', 'invoiced'),
        Index('idx_expenses_invoice', 'invoice_id'),
    )


class SequenceModel(Base):
    """Named counters backing invoice and case numbering"""
    __tablename__ = 'sequences'

    key = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
