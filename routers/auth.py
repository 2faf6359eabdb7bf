import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database import get_db
from errors import ValidationError, AuthenticationError
from models.users import User
from pydantic import BaseModel
from utils import verify_password

logger = logging.getLogger(__name__)

# ✅ Router setup with prefix
router = APIRouter(prefix="/api", tags=["Authentication"])

# ✅ Login Data Model
class LoginSchema(BaseModel):
    email: str
    password: str


def is_valid_email(email: str) -> bool:
    return "@" in email and len(email) >= 8


# Login Process Route (POST)
@router.post("/login")
def process_login(data: LoginSchema, db: Session = Depends(get_db)):
    email = data.email.strip()
    if not is_valid_email(email):
        raise ValidationError("Invalid email or password format")

    user = db.query(User).filter(User.email == email).first()

    # Same message for unknown email and wrong password
    if not user or not verify_password(user.password_hash, data.password):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password")

    logger.info("User logged in: %s", email)
    return {"success": True, "message": "Login successful", "user": user.to_dict()}
