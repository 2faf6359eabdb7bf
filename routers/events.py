import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from database import get_db
from errors import ValidationError, NotFoundError, ConflictError
from models.events import Event
from models.transactions import TransactionEvent
from pydantic import BaseModel, Field
from typing import Optional
import datetime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"])

# =======================
# 1. PYDANTIC SCHEMAS
# =======================
class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    amount: float = Field(ge=0, allow_inf_nan=False)
    semester: str = Field(min_length=1)
    date: Optional[datetime.date] = None
    description: Optional[str] = None

class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    semester: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime.date] = None
    description: Optional[str] = None


# =======================
# 2. HELPERS
# =======================
def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event

def find_duplicate(db: Session, title: str, semester: str, exclude_id: Optional[int] = None):
    query = db.query(Event).filter(Event.title == title, Event.semester == semester)
    if exclude_id is not None:
        query = query.filter(Event.id != exclude_id)
    return query.first()


# =======================
# 3. EVENT APIs
# =======================
@router.get("")
def list_events(db: Session = Depends(get_db)):
    events = db.query(Event).order_by(Event.id).all()
    return {"success": True, "data": [e.to_dict() for e in events], "count": len(events)}

@router.get("/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": get_event_or_404(db, event_id).to_dict()}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(item: EventCreate, db: Session = Depends(get_db)):
    title = item.title.strip()
    semester = item.semester.strip()
    if not title or not semester:
        raise ValidationError("Missing required fields")

    if find_duplicate(db, title, semester):
        raise ConflictError("Event with this title already exists for the semester")

    new_event = Event(
        title=title,
        amount=round(item.amount, 2),
        semester=semester,
        date=item.date,
        description=item.description,
    )
    db.add(new_event)
    try:
        db.commit()
    except IntegrityError:
        # Do requests ek saath aaye toh unique constraint pakad leta hai
        db.rollback()
        raise ConflictError("Event with this title already exists for the semester")

    logger.info("Event created: %s (%s) id=%s", title, semester, new_event.id)
    return {"success": True, "message": "Event created successfully", "eventId": new_event.id}

@router.put("/{event_id}")
def update_event(event_id: int, item: EventUpdate, db: Session = Depends(get_db)):
    event = get_event_or_404(db, event_id)
    changes = item.model_dump(exclude_unset=True)

    # null for a required column is treated as "not sent"
    for key in ("title", "amount", "semester"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    title = changes.get("title", event.title).strip()
    semester = changes.get("semester", event.semester).strip()
    if not title or not semester:
        raise ValidationError("Title and semester cannot be blank")
    if find_duplicate(db, title, semester, exclude_id=event.id):
        raise ConflictError("Event with this title already exists for the semester")

    if "title" in changes:
        changes["title"] = title
    if "semester" in changes:
        changes["semester"] = semester
    if "amount" in changes:
        changes["amount"] = round(changes["amount"], 2)

    for key, value in changes.items():
        setattr(event, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Event with this title already exists for the semester")

    logger.info("Event updated: id=%s fields=%s", event_id, sorted(changes))
    return {"success": True, "message": "Event updated successfully", "data": event.to_dict()}

@router.delete("/{event_id}")
def delete_event(event_id: int, db: Session = Depends(get_db)):
    event = get_event_or_404(db, event_id)

    # Paid events stay, warna purani receipts toot jayengi
    paid = db.query(TransactionEvent).filter(TransactionEvent.event_id == event_id).count()
    if paid:
        raise ConflictError("Event has recorded payments and cannot be deleted")

    db.delete(event)
    db.commit()
    logger.info("Event deleted: id=%s", event_id)
    return {"success": True, "message": "Event deleted successfully"}
