"""User model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from backend.database import Base


class User(Base):
    """Represents a staff member, doctor or patient account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    role = Column(String, nullable=False)  # nurse/doctor/lab/pharmacist/patient
    specialization = Column(String)
    phone = Column(String)
    patient_id = Column(Integer, ForeignKey("patients.id"))
