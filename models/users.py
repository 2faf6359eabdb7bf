from sqlalchemy import Column, Integer, String
from database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=True)
    password_hash = Column(String(255), nullable=False)   # werkzeug salted hash, never plaintext

    def to_dict(self):
        # Password field kabhi response mein nahi jata
        return {"id": self.id, "email": self.email, "name": self.name}
