"""Appointment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship
from backend.database import ACTIVE_SLOT_INDEX_NAME, Base

APPOINTMENT_STATUSES = ('scheduled', 'confirmed', 'in-progress', 'completed', 'cancelled', 'no-show')
ACTIVE_STATUSES = ('scheduled', 'confirmed')
APPOINTMENT_TYPES = ('consultation', 'follow-up', 'emergency', 'routine-check', 'vaccination', 'other')

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 120
DEFAULT_DURATION_MINUTES = 30
DEFAULT_APPOINTMENT_TYPE = 'consultation'

_active_slot_clause = text("status IN ('scheduled', 'confirmed')")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """Represents a booking of a patient with a doctor."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index('idx_appointments_doctor_date', 'doctor_id', 'date'),
        Index('idx_appointments_patient_date', 'patient_id', 'date'),
        # At most one scheduled/confirmed appointment per doctor slot.
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            'doctor_id',
            'date',
            'time',
            unique=True,
            sqlite_where=_active_slot_clause,
            postgresql_where=_active_slot_clause,
        ),
    )

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=DEFAULT_DURATION_MINUTES)
    reason = Column(String, nullable=False)
    appointment_type = Column(String(32), nullable=False, default=DEFAULT_APPOINTMENT_TYPE)
    status = Column(String(16), nullable=False, default='scheduled')
    notes = Column(String)
    reminder_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    patient = relationship("Patient")
    doctor = relationship("User")
