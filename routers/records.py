import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from database import get_db
from errors import ValidationError, NotFoundError, ConflictError
from models.students import Student
from models.transactions import Transaction
from pydantic import BaseModel, Field
from typing import Optional

logger = logging.getLogger(__name__)

# /api/records is the one path for student records
router = APIRouter(prefix="/api/records", tags=["Student Records"])

# --- Schemas (JSON keys follow the front end: IDnumber, FirstName ...) ---
class StudentCreate(BaseModel):
    id_number: str = Field(alias="IDnumber", min_length=1)
    first_name: str = Field(alias="FirstName", min_length=1)
    last_name: str = Field(alias="LastName", min_length=1)
    course: Optional[str] = Field(default=None, alias="Course")
    year: Optional[str] = Field(default=None, alias="Year")
    qr_code: Optional[str] = Field(default=None, alias="qrCode")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True

class StudentUpdate(BaseModel):
    id_number: Optional[str] = Field(default=None, alias="IDnumber", min_length=1)
    first_name: Optional[str] = Field(default=None, alias="FirstName", min_length=1)
    last_name: Optional[str] = Field(default=None, alias="LastName", min_length=1)
    course: Optional[str] = Field(default=None, alias="Course")
    year: Optional[str] = Field(default=None, alias="Year")
    qr_code: Optional[str] = Field(default=None, alias="qrCode")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True


def get_student_or_404(db: Session, student_id: int) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found")
    return student

def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()

def check_unique(db: Session, id_number: Optional[str], qr_code: Optional[str], exclude_id: Optional[int] = None):
    if id_number:
        query = db.query(Student).filter(Student.id_number == id_number)
        if exclude_id is not None:
            query = query.filter(Student.id != exclude_id)
        if query.first():
            raise ConflictError("A student with this ID number already exists")
    if qr_code:
        query = db.query(Student).filter(Student.qr_code == qr_code)
        if exclude_id is not None:
            query = query.filter(Student.id != exclude_id)
        if query.first():
            raise ConflictError("QR code is already assigned to another student")


# ===============================
#   STUDENT CRUD
# ===============================

@router.get("")
def list_students(db: Session = Depends(get_db)):
    students = db.query(Student).order_by(Student.last_name, Student.first_name, Student.id).all()
    return {"success": True, "students": [s.to_dict() for s in students]}

@router.get("/{student_id}")
def get_student(student_id: int, db: Session = Depends(get_db)):
    return {"success": True, "student": get_student_or_404(db, student_id).to_dict()}

@router.post("", status_code=status.HTTP_201_CREATED)
def add_student(item: StudentCreate, db: Session = Depends(get_db)):
    data = item.model_dump()
    data["id_number"] = data["id_number"].strip()
    if not data["id_number"]:
        raise ValidationError("Missing required fields")
    data["qr_code"] = blank_to_none(data["qr_code"])

    check_unique(db, data["id_number"], data["qr_code"])

    new_student = Student(**data)
    db.add(new_student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Student record conflicts with an existing ID number or QR code")

    logger.info("Student added: %s (id=%s)", new_student.id_number, new_student.id)
    return {"success": True, "message": "Student added successfully!", "student": new_student.to_dict()}

@router.put("/{student_id}")
def update_student(student_id: int, item: StudentUpdate, db: Session = Depends(get_db)):
    student = get_student_or_404(db, student_id)
    changes = item.model_dump(exclude_unset=True)

    for key in ("id_number", "first_name", "last_name"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    if "id_number" in changes:
        changes["id_number"] = changes["id_number"].strip()
        if not changes["id_number"]:
            raise ValidationError("IDnumber cannot be blank")
    if "qr_code" in changes:
        changes["qr_code"] = blank_to_none(changes["qr_code"])

    check_unique(db, changes.get("id_number"), changes.get("qr_code"), exclude_id=student.id)

    for key, value in changes.items():
        setattr(student, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Student record conflicts with an existing ID number or QR code")

    logger.info("Student updated: id=%s fields=%s", student_id, sorted(changes))
    return {"success": True, "message": "Updated successfully", "student": student.to_dict()}

@router.delete("/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)):
    student = get_student_or_404(db, student_id)

    has_payments = db.query(Transaction).filter(Transaction.student_id == student_id).count()
    if has_payments:
        raise ConflictError("Student has recorded transactions and cannot be deleted")

    db.delete(student)
    db.commit()
    logger.info("Student deleted: id=%s", student_id)
    return {"success": True, "message": "Deleted successfully"}
