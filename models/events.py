from sqlalchemy import Column, Integer, String, Float, Date, Text, UniqueConstraint, CheckConstraint
from database import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)   # eventID
    title = Column(String(150), nullable=False)
    date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Float, nullable=False, default=0.0)
    semester = Column(String(50), nullable=False)        # e.g. "1st Semester"

    # One event title per semester
    __table_args__ = (
        UniqueConstraint('title', 'semester', name='uq_event_title_semester'),
        CheckConstraint('amount >= 0', name='ck_event_amount_non_negative'),
    )

    def to_dict(self):
        return {
            "eventID": self.id,
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "description": self.description,
            "amount": self.amount,
            "semester": self.semester,
        }
