"""Patient model definitions."""

from sqlalchemy import Column, Date, Integer, String
from backend.database import Base


class Patient(Base):
    """Represents a registered patient profile."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    dob = Column(Date)
    gender = Column(String)
    contact = Column(String)
    address = Column(String)
