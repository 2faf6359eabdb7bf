"""
Transactions Router - payments for one or more events
Filtered listing, receipt numbers, server-side totals and installments
"""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.exc import IntegrityError
from database import get_db
from config import Config
from errors import ValidationError, NotFoundError, ConflictError
from models.students import Student
from models.events import Event
from models.transactions import Transaction, TransactionEvent, ReceiptCounter
from models.installments import Installment, PAID, PENDING, normalize_status
from pydantic import BaseModel, Field
from typing import List, Optional
from utils import to_amount, is_all, amount_in_words
import datetime

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transactions"])

STATUS_PAID = "Paid"
STATUS_PARTIAL = "Partial"

# =====================
# PYDANTIC SCHEMAS
# =====================

class TransactionCreate(BaseModel):
    student_id: str = Field(alias="studentID", min_length=1)   # IDnumber (natural key)
    event_ids: List[int] = Field(alias="eventIDs")
    payment_method: str = Field(alias="paymentMethod", min_length=1)
    date: Optional[datetime.date] = None
    receipt_number: Optional[str] = Field(default=None, alias="receiptNumber")
    amount_paid: Optional[float] = Field(default=None, alias="amountPaid", ge=0, allow_inf_nan=False)

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True

class TransactionUpdate(BaseModel):
    transaction_id: int = Field(alias="transactionID")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod", min_length=1)
    date: Optional[datetime.date] = None
    receipt_number: Optional[str] = Field(default=None, alias="receiptNumber", min_length=1)
    status: Optional[str] = Field(default=None, min_length=1)
    event_ids: Optional[List[int]] = Field(default=None, alias="eventIDs")

    class Config:
        populate_by_name = True


# =====================
# HELPER FUNCTIONS
# =====================

def generate_receipt_number(db: Session) -> str:
    """Generate unique receipt number: REC-2026-0001"""
    current_year = datetime.date.today().year

    # Get or create counter for current year
    counter = db.query(ReceiptCounter).filter(ReceiptCounter.year == current_year).first()

    if not counter:
        counter = ReceiptCounter(year=current_year, last_number=0)
        db.add(counter)

    while True:
        counter.last_number = (counter.last_number or 0) + 1
        db.flush()
        receipt_no = f"{Config.RECEIPT_PREFIX}-{current_year}-{str(counter.last_number).zfill(4)}"
        # Manually typed receipt numbers can already hold this slot
        if not db.query(Transaction.id).filter(Transaction.receipt_number == receipt_no).first():
            return receipt_no


def load_events(db: Session, event_ids: List[int]) -> List[Event]:
    """Fetch the selected events in request order; 404 for any unknown id."""
    if not event_ids:
        raise ValidationError("Select at least one event")

    unique_ids = list(dict.fromkeys(event_ids))
    events = db.query(Event).filter(Event.id.in_(unique_ids)).all()
    by_id = {e.id: e for e in events}

    missing = [eid for eid in unique_ids if eid not in by_id]
    if missing:
        raise NotFoundError(f"Event not found: {', '.join(str(m) for m in missing)}")

    return [by_id[eid] for eid in unique_ids]


def compute_total(events) -> float:
    return round(sum(to_amount(e.amount) for e in events), 2)


def paid_so_far(transaction: Transaction) -> float:
    return round(sum(to_amount(i.amount) for i in transaction.installments if i.status == PAID), 2)


def refresh_status(transaction: Transaction):
    """Paid when paid installments cover the total, Partial otherwise. No installments -> untouched."""
    if not transaction.installments:
        return
    if paid_so_far(transaction) >= to_amount(transaction.total_amount):
        transaction.status = STATUS_PAID
    else:
        transaction.status = STATUS_PARTIAL


def sync_balance(transaction: Transaction):
    """Rebuild the Pending installment after the total changed."""
    paid = paid_so_far(transaction)
    total = to_amount(transaction.total_amount)
    if paid > total:
        raise ValidationError("Paid installments exceed the new total amount")

    for inst in [i for i in transaction.installments if i.status == PENDING]:
        transaction.installments.remove(inst)

    balance = round(total - paid, 2)
    if balance > 0:
        transaction.installments.append(Installment(amount=balance, status=PENDING, date=datetime.date.today()))
    refresh_status(transaction)


def serialize_transaction(t: Transaction) -> dict:
    s = t.student
    events = [
        {
            "eventID": item.event_id,
            "title": item.event.title if item.event else None,
            "amount": to_amount(item.amount),
        }
        for item in t.items
    ]
    return {
        "transactionID": t.id,
        "date": t.date.isoformat() if t.date else None,
        "paymentMethod": t.payment_method,
        "receiptNumber": t.receipt_number,
        "status": t.status,
        "totalAmount": to_amount(t.total_amount),
        "studentID": s.id_number if s else None,   # natural key, same as the filter and POST body
        "studentRecordID": t.student_id,
        "IDnumber": s.id_number if s else None,
        "FirstName": s.first_name if s else None,
        "LastName": s.last_name if s else None,
        "Course": s.course if s else None,
        "Year": s.year if s else None,
        "events": events,
        "eventsPaid": ", ".join(e["title"] for e in events if e["title"]),
        "installments": [i.to_dict() for i in t.installments],
    }


def build_transaction_query(
    db: Session,
    studentID: Optional[str] = None,
    eventID: Optional[str] = None,
    paymentMethod: Optional[str] = None,
    installmentStatus: Optional[str] = None,
):
    """
    Transactions joined with their student, newest first.
    Every filter that isn't "All"/blank adds one AND-ed equality predicate.
    Returns None when a filter can never match (e.g. non-numeric eventID).
    """
    query = db.query(Transaction).join(Student, Transaction.student_id == Student.id).options(
        joinedload(Transaction.student),
        selectinload(Transaction.items).joinedload(TransactionEvent.event),
        selectinload(Transaction.installments),
    )

    if not is_all(studentID):
        query = query.filter(Student.id_number == studentID.strip())

    if not is_all(eventID):
        try:
            event_id = int(str(eventID).strip())
        except ValueError:
            return None
        query = query.filter(Transaction.items.any(TransactionEvent.event_id == event_id))

    if not is_all(paymentMethod):
        query = query.filter(Transaction.payment_method == paymentMethod.strip())

    if not is_all(installmentStatus):
        query = query.filter(Transaction.installments.any(Installment.status == normalize_status(installmentStatus)))

    return query.order_by(Transaction.date.desc(), Transaction.id.desc())


def find_transactions(db: Session, **filters) -> List[Transaction]:
    query = build_transaction_query(db, **filters)
    if query is None:
        return []
    return query.all()


def get_transaction_or_404(db: Session, transaction_id: int) -> Transaction:
    transaction = db.query(Transaction).options(
        joinedload(Transaction.student),
        selectinload(Transaction.items).joinedload(TransactionEvent.event),
        selectinload(Transaction.installments),
    ).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundError("Transaction not found")
    return transaction


def check_receipt_unique(db: Session, receipt_number: str, exclude_id: Optional[int] = None):
    query = db.query(Transaction.id).filter(Transaction.receipt_number == receipt_number)
    if exclude_id is not None:
        query = query.filter(Transaction.id != exclude_id)
    if query.first():
        raise ConflictError("Receipt number already exists")


# =====================
# LISTING APIs
# =====================

@router.get("/api/transactions")
def list_transactions(
    studentID: Optional[str] = Query(default="All"),
    eventID: Optional[str] = Query(default="All"),
    paymentMethod: Optional[str] = Query(default="All"),
    installmentStatus: Optional[str] = Query(default="All"),
    db: Session = Depends(get_db),
):
    rows = find_transactions(
        db,
        studentID=studentID,
        eventID=eventID,
        paymentMethod=paymentMethod,
        installmentStatus=installmentStatus,
    )
    return {"success": True, "transactions": [serialize_transaction(t) for t in rows]}


@router.get("/api/transactions/{transaction_id}")
def get_receipt(transaction_id: int, db: Session = Depends(get_db)):
    """Single transaction for receipt printing"""
    transaction = get_transaction_or_404(db, transaction_id)
    data = serialize_transaction(transaction)
    data["amountPaid"] = paid_so_far(transaction) if transaction.installments else data["totalAmount"]
    data["balance"] = round(data["totalAmount"] - data["amountPaid"], 2)
    data["amountInWords"] = amount_in_words(data["totalAmount"])
    return {"success": True, "transaction": data}


@router.get("/api/history")
def transaction_history(db: Session = Depends(get_db)):
    """Compact history - one line per receipt"""
    rows = find_transactions(db)
    history = []
    for t in rows:
        full = serialize_transaction(t)
        history.append({
            key: full[key]
            for key in (
                "transactionID", "date", "paymentMethod", "receiptNumber", "status",
                "totalAmount", "IDnumber", "FirstName", "LastName", "eventsPaid",
            )
        })
    return {"success": True, "transactions": history}


# =====================
# PAYMENT APIs
# =====================

@router.post("/api/transactions", status_code=status.HTTP_201_CREATED)
def create_transaction(pay: TransactionCreate, db: Session = Depends(get_db)):
    student = db.query(Student).filter(Student.id_number == pay.student_id.strip()).first()
    if not student:
        raise NotFoundError("Student not found")

    events = load_events(db, pay.event_ids)
    total = compute_total(events)

    amount_paid = total if pay.amount_paid is None else round(pay.amount_paid, 2)
    if amount_paid > total:
        raise ValidationError("Amount paid cannot exceed the total amount")
    balance = round(total - amount_paid, 2)

    if pay.receipt_number and pay.receipt_number.strip():
        receipt_no = pay.receipt_number.strip()
        check_receipt_unique(db, receipt_no)
    else:
        receipt_no = generate_receipt_number(db)

    transaction = Transaction(
        student_id=student.id,
        date=pay.date or datetime.date.today(),
        payment_method=pay.payment_method.strip(),
        receipt_number=receipt_no,
        status=STATUS_PAID if balance == 0 else STATUS_PARTIAL,
        total_amount=total,
    )
    for event in events:
        transaction.items.append(TransactionEvent(event_id=event.id, amount=to_amount(event.amount)))

    # Installments: what came in now, and what is still owed
    if amount_paid > 0:
        transaction.installments.append(Installment(amount=amount_paid, status=PAID, date=transaction.date))
    if balance > 0:
        transaction.installments.append(Installment(amount=balance, status=PENDING, date=transaction.date))

    db.add(transaction)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Receipt number already exists")

    logger.info(
        "Transaction %s created for %s: %d event(s), total=%.2f, paid=%.2f",
        receipt_no, student.id_number, len(events), total, amount_paid,
    )
    transaction = get_transaction_or_404(db, transaction.id)
    return {"success": True, "message": "Transaction recorded", "transaction": serialize_transaction(transaction)}


@router.put("/api/transactions")
def update_transaction(item: TransactionUpdate, db: Session = Depends(get_db)):
    transaction = get_transaction_or_404(db, item.transaction_id)
    changes = item.model_dump(exclude_unset=True, exclude={"transaction_id"})
    changes = {k: v for k, v in changes.items() if v is not None}

    if "receipt_number" in changes:
        changes["receipt_number"] = changes["receipt_number"].strip()
        if not changes["receipt_number"]:
            raise ValidationError("Receipt number cannot be blank")
        check_receipt_unique(db, changes["receipt_number"], exclude_id=transaction.id)
        transaction.receipt_number = changes["receipt_number"]

    if "payment_method" in changes:
        transaction.payment_method = changes["payment_method"].strip()

    if "date" in changes:
        transaction.date = changes["date"]

    if "event_ids" in changes:
        events = load_events(db, changes["event_ids"])
        transaction.items.clear()
        db.flush()
        for event in events:
            transaction.items.append(TransactionEvent(event_id=event.id, amount=to_amount(event.amount)))
        transaction.total_amount = compute_total(events)
        sync_balance(transaction)

    # Explicit status wins over the derived one
    if "status" in changes:
        transaction.status = changes["status"].strip()

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Receipt number already exists")

    logger.info("Transaction updated: id=%s fields=%s", transaction.id, sorted(changes))
    transaction = get_transaction_or_404(db, transaction.id)
    return {"success": True, "message": "Transaction updated", "transaction": serialize_transaction(transaction)}


@router.delete("/api/transactions")
def delete_transaction(transactionID: int = Query(...), db: Session = Depends(get_db)):
    transaction = get_transaction_or_404(db, transactionID)
    receipt_no = transaction.receipt_number
    db.delete(transaction)
    db.commit()
    logger.info("Transaction deleted: id=%s receipt=%s", transactionID, receipt_no)
    return {"success": True, "message": "Transaction deleted successfully"}
