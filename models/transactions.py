"""
Payment models - one transaction pays for one or more events.
Event prices are copied onto the join row so old receipts don't change
when an event's amount is edited later.
"""
from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
import datetime


# 1. TRANSACTION - one receipt
class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)   # transactionID
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    date = Column(Date, default=datetime.date.today, index=True)
    payment_method = Column(String(50))                  # Cash, GCash, Bank Transfer
    receipt_number = Column(String(30), unique=True, nullable=False, index=True)
    status = Column(String(20), default="Paid")          # Paid, Partial
    total_amount = Column(Float, default=0.0)

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='ck_transaction_total_non_negative'),
    )

    # Relationships
    student = relationship("models.students.Student", back_populates="transactions")
    items = relationship(
        "TransactionEvent",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionEvent.id",
    )
    installments = relationship(
        "models.installments.Installment",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="Installment.id",
    )


# 2. TRANSACTION <-> EVENT join table
class TransactionEvent(Base):
    __tablename__ = "transaction_events"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    amount = Column(Float, default=0.0)   # event price when paid

    __table_args__ = (
        UniqueConstraint('transaction_id', 'event_id', name='uq_transaction_event'),
    )

    transaction = relationship("Transaction", back_populates="items")
    event = relationship("models.events.Event")


# 3. RECEIPT COUNTER - For generating unique receipt numbers per year
class ReceiptCounter(Base):
    __tablename__ = "receipt_counters"

    id = Column(Integer, primary_key=True, index=True)
    year = Column(Integer, nullable=False, unique=True)  # e.g., 2026
    last_number = Column(Integer, default=0)  # Last used receipt number for this year
