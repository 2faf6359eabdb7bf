from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import or_
from database import get_db
from errors import ValidationError, NotFoundError
from models.students import Student
from pydantic import BaseModel

router = APIRouter(prefix="/api", tags=["Student Verification"])

class VerifyRequest(BaseModel):
    qrData: str

    class Config:
        coerce_numbers_to_str = True


@router.post("/verify-student")
def verify_student(req: VerifyRequest, db: Session = Depends(get_db)):
    """Scanned payload can be the IDnumber itself or the card's QR code value"""
    payload = req.qrData.strip()
    if not payload:
        raise ValidationError("Missing required fields")

    student = db.query(Student).filter(
        or_(Student.id_number == payload, Student.qr_code == payload)
    ).first()

    if not student:
        raise NotFoundError("Student not found")

    return {"success": True, "student": student.to_dict()}
