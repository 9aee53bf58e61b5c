"""Working hours model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from backend.database import Base


class DoctorWorkingHours(Base):
    """Represents the daily working window of one doctor."""
    __tablename__ = "doctor_working_hours"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    start = Column(String(5), nullable=False)
    end = Column(String(5), nullable=False)
    break_start = Column(String(5), nullable=False)
    break_end = Column(String(5), nullable=False)
