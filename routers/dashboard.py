from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from database import get_db
from models.students import Student
from models.events import Event
from models.transactions import Transaction, TransactionEvent
from models.installments import Installment, PAID, PENDING
from utils import to_amount

router = APIRouter(prefix="/api", tags=["Dashboard"])

@router.get("/dashboard")
def dashboard_summary(db: Session = Depends(get_db)):
    # 1. Basic Counts
    total_students = db.query(Student).count()
    total_events = db.query(Event).count()
    total_transactions = db.query(Transaction).count()

    # 2. Financials
    billed = db.query(func.sum(Transaction.total_amount)).scalar() or 0.0
    collected = db.query(func.sum(Installment.amount))\
        .filter(Installment.status == PAID).scalar() or 0.0
    outstanding = db.query(func.sum(Installment.amount))\
        .filter(Installment.status == PENDING).scalar() or 0.0

    # Transactions recorded without installments count as fully paid
    no_installments = db.query(func.sum(Transaction.total_amount))\
        .filter(~Transaction.installments.any()).scalar() or 0.0
    collected += no_installments

    # 3. Per payment method
    by_method = db.query(
        Transaction.payment_method,
        func.count(Transaction.id),
        func.sum(Transaction.total_amount),
    ).group_by(Transaction.payment_method).order_by(Transaction.payment_method).all()

    # 4. Per event
    by_event = db.query(
        Event.id,
        Event.title,
        Event.semester,
        func.count(TransactionEvent.id),
        func.sum(TransactionEvent.amount),
    ).join(TransactionEvent, TransactionEvent.event_id == Event.id)\
        .group_by(Event.id, Event.title, Event.semester)\
        .order_by(Event.id).all()

    return {
        "success": True,
        "counts": {
            "students": total_students,
            "events": total_events,
            "transactions": total_transactions,
        },
        "totals": {
            "billed": to_amount(billed),
            "collected": to_amount(collected),
            "outstanding": to_amount(outstanding),
        },
        "byPaymentMethod": [
            {"paymentMethod": method, "count": count, "amount": to_amount(amount)}
            for method, count, amount in by_method
        ],
        "byEvent": [
            {"eventID": eid, "title": title, "semester": semester, "count": count, "amount": to_amount(amount)}
            for eid, title, semester, count, amount in by_event
        ],
    }
