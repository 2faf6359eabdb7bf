from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
import datetime

PAID = "Paid"
PENDING = "Pending"
INSTALLMENT_STATUSES = (PAID, PENDING)

def normalize_status(value):
    """Map user input such as " pending " onto the stored spelling ("Pending")."""
    return (value or "").strip().capitalize()

class Installment(Base):
    __tablename__ = "installments"

    id = Column(Integer, primary_key=True, index=True)   # installmentID
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, default=0.0)
    status = Column(String(20), default=PENDING)
    date = Column(Date, default=datetime.date.today)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='ck_installment_amount_non_negative'),
    )

    transaction = relationship("models.transactions.Transaction", back_populates="installments")

    def to_dict(self):
        return {
            "installmentID": self.id,
            "transactionID": self.transaction_id,
            "amount": self.amount,
            "status": self.status,
            "date": self.date.isoformat() if self.date else None,
        }
