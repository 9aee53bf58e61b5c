"""Lookups against the patient and doctor records the engine depends on."""

from sqlalchemy.orm import Session

from backend.auth.caller import DOCTOR_ROLE
from backend.core.errors import NotFoundError
from backend.models.patient import Patient
from backend.models.user import User
from backend.models.working_hours import DoctorWorkingHours
from backend.scheduling.working_hours import WorkingHours, default_working_hours


def get_patient(db: Session, patient_id: int) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if patient is None:
        raise NotFoundError('Patient not found.')
    return patient


def get_doctor(db: Session, doctor_id: int) -> User:
    doctor = db.query(User).filter(User.id == doctor_id).first()
    if doctor is None or doctor.role != DOCTOR_ROLE:
        raise NotFoundError('Doctor not found.')
    return doctor


def list_doctors(db: Session) -> list[User]:
    return db.query(User).filter(User.role == DOCTOR_ROLE).order_by(User.name.asc()).all()


def get_working_hours(db: Session, doctor_id: int) -> WorkingHours:
    row = db.query(DoctorWorkingHours).filter(DoctorWorkingHours.doctor_id == doctor_id).first()
    if row is None:
        return default_working_hours()
    return WorkingHours.from_strings(row.start, row.end, row.break_start, row.break_end)
