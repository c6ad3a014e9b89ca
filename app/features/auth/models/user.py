from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class User(BaseModel):
    """Website owner. The scan core only reads the email as alert recipient."""
    __tablename__ = "users"
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)

    websites = relationship("Website", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
