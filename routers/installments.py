import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from database import get_db
from errors import ValidationError, NotFoundError
from models.installments import Installment, INSTALLMENT_STATUSES, PAID, PENDING, normalize_status
from models.transactions import Transaction
from pydantic import BaseModel, Field
from typing import Optional
from utils import is_all
from routers.transactions import sync_balance
import datetime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/installments", tags=["Installments"])

# --- Schemas ---
class InstallmentCreate(BaseModel):
    transaction_id: int = Field(alias="transactionID")
    amount: float = Field(gt=0, allow_inf_nan=False)
    status: str = PAID
    date: Optional[datetime.date] = None

    class Config:
        populate_by_name = True

class InstallmentUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    status: Optional[str] = None
    date: Optional[datetime.date] = None


def check_status(value: str) -> str:
    value = normalize_status(value)
    if value not in INSTALLMENT_STATUSES:
        raise ValidationError(f"Installment status must be one of: {', '.join(INSTALLMENT_STATUSES)}")
    return value


@router.get("")
def list_installments(
    transactionID: Optional[int] = None,
    status: Optional[str] = Query(default="All"),
    db: Session = Depends(get_db),
):
    query = db.query(Installment)
    if transactionID is not None:
        query = query.filter(Installment.transaction_id == transactionID)
    if not is_all(status):
        query = query.filter(Installment.status == normalize_status(status))
    rows = query.order_by(Installment.transaction_id, Installment.id).all()
    return {"success": True, "installments": [i.to_dict() for i in rows]}

@router.post("", status_code=status.HTTP_201_CREATED)
def add_installment(item: InstallmentCreate, db: Session = Depends(get_db)):
    transaction = db.query(Transaction).filter(Transaction.id == item.transaction_id).first()
    if not transaction:
        raise NotFoundError("Transaction not found")

    # Only payments are recorded here; the pending balance is derived
    if check_status(item.status) != PAID:
        raise ValidationError("Only Paid installments can be recorded; the pending balance follows the transaction total")

    installment = Installment(
        amount=round(item.amount, 2),
        status=PAID,
        date=item.date or datetime.date.today(),
    )
    transaction.installments.append(installment)
    # A payment eats into the pending balance
    sync_balance(transaction)
    db.commit()

    logger.info("Installment added: transaction=%s amount=%.2f status=%s",
                transaction.id, installment.amount, installment.status)
    return {"success": True, "message": "Installment recorded", "installment": installment.to_dict(),
            "transactionStatus": transaction.status}

@router.put("/{installment_id}")
def update_installment(installment_id: int, item: InstallmentUpdate, db: Session = Depends(get_db)):
    installment = db.query(Installment).filter(Installment.id == installment_id).first()
    if not installment:
        raise NotFoundError("Installment not found")

    changes = item.model_dump(exclude_unset=True)
    if changes.get("amount") is not None:
        installment.amount = round(changes["amount"], 2)
    if changes.get("status") is not None:
        installment.status = check_status(changes["status"])
    if changes.get("date") is not None:
        installment.date = changes["date"]

    if installment.status == PENDING:
        raise ValidationError("Pending balance follows the transaction total; record a payment instead")

    # Pending balance is always derived from total minus paid
    transaction = installment.transaction
    sync_balance(transaction)
    db.commit()

    logger.info("Installment updated: id=%s fields=%s", installment_id, sorted(changes))
    return {"success": True, "message": "Installment updated", "installment": installment.to_dict(),
            "transactionStatus": transaction.status}
