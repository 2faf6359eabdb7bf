from config import Config
from database import SessionLocal, engine, Base
from models.students import Student
from models.events import Event
import models.transactions  # noqa: F401  (relationship targets)
import models.installments  # noqa: F401
from models.users import User
from utils import hash_password
import datetime

# --- MAGICAL LINE (Ye Tables bana degi agar missing hain) ---
Base.metadata.create_all(bind=engine)


def seed_data(db):
    print("🌱 Seeding data...")

    # 1. ADMIN USER (salted hash, never plaintext)
    email = Config.SEED_ADMIN_EMAIL
    if not db.query(User).filter_by(email=email).first():
        db.add(User(email=email, name="Administrator", password_hash=hash_password(Config.SEED_ADMIN_PASSWORD)))
        print(f"👤 Added user: {email}")
    else:
        print(f"ℹ️  Exists: {email}")
    db.commit()

    # 2. EVENTS
    events = [
        {"title": "Intramurals", "semester": "1st Semester", "amount": 150, "date": datetime.date(2026, 9, 15)},
        {"title": "Foundation Day", "semester": "1st Semester", "amount": 100, "date": datetime.date(2026, 10, 5)},
        {"title": "Acquaintance Party", "semester": "1st Semester", "amount": 250, "date": None},
        {"title": "Sports Fest", "semester": "2nd Semester", "amount": 200, "date": None},
    ]
    for e in events:
        exists = db.query(Event).filter_by(title=e["title"], semester=e["semester"]).first()
        if not exists:
            db.add(Event(**e))
            print(f"🎉 Added Event: {e['title']} ({e['semester']})")
    db.commit()

    # 3. STUDENTS
    students = [
        {"id_number": "2021-0001", "first_name": "Juan", "last_name": "Dela Cruz", "course": "BSIT", "year": "4"},
        {"id_number": "2022-0002", "first_name": "Maria", "last_name": "Santos", "course": "BSCS", "year": "3"},
        {"id_number": "2023-0003", "first_name": "Jose", "last_name": "Reyes", "course": "BSED", "year": "2"},
    ]
    for s in students:
        if not db.query(Student).filter_by(id_number=s["id_number"]).first():
            db.add(Student(**s))
            print(f"🎓 Added Student: {s['id_number']}")
    db.commit()

    print("\n🎉 All Data Seeded Successfully!")


if __name__ == "__main__":
    db = SessionLocal()
    try:
        seed_data(db)
    finally:
        db.close()
