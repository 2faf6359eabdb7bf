from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database import Base

class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)       # studentID (surrogate)
    id_number = Column(String(50), unique=True, index=True, nullable=False)  # IDnumber e.g. 2021-0001

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    course = Column(String(100), nullable=True)
    year = Column(String(20), nullable=True)

    # Opaque payload printed on the student's QR card (verify-student)
    qr_code = Column(String(255), unique=True, nullable=True)

    # --- RELATIONSHIPS ---
    transactions = relationship("models.transactions.Transaction", back_populates="student")

    def to_dict(self):
        return {
            "studentID": self.id,
            "IDnumber": self.id_number,
            "FirstName": self.first_name,
            "LastName": self.last_name,
            "Course": self.course,
            "Year": self.year,
            "qrCode": self.qr_code,
        }
