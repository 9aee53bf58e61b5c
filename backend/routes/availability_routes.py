from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.auth.caller import Caller
from backend.auth.dependencies import get_current_caller
from backend.database import get_db, storage_errors
from backend.models.appointment import (
    APPOINTMENT_TYPES,
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
)
from backend.scheduling import availability, directory

router = APIRouter(tags=['availability'])


class DoctorResponse(BaseModel):
    id: int
    name: str
    email: str | None = None
    specialization: str | None = None
    phone: str | None = None

    class Config:
        from_attributes = True


class DoctorSummaryResponse(BaseModel):
    id: int
    name: str
    specialization: str | None = None


class WorkingHoursResponse(BaseModel):
    start: str
    end: str
    break_start: str
    break_end: str


class AvailabilityResponse(BaseModel):
    doctor: DoctorSummaryResponse
    date: date
    available_slots: list[str]
    working_hours: WorkingHoursResponse


class AppointmentTypeOptionResponse(BaseModel):
    appointment_type: str
    duration_minutes: int
    min_duration_minutes: int
    max_duration_minutes: int


@router.get('/doctors', response_model=list[DoctorResponse])
def list_doctors(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    del caller
    with storage_errors(db):
        return directory.list_doctors(db)


@router.get('/appointment-types', response_model=list[AppointmentTypeOptionResponse])
def list_appointment_types():
    return [
        AppointmentTypeOptionResponse(
            appointment_type=appointment_type,
            duration_minutes=DEFAULT_DURATION_MINUTES,
            min_duration_minutes=MIN_DURATION_MINUTES,
            max_duration_minutes=MAX_DURATION_MINUTES,
        )
        for appointment_type in APPOINTMENT_TYPES
    ]


@router.get('/{doctor_id}', response_model=AvailabilityResponse)
def get_doctor_availability(
    doctor_id: int,
    day: date = Query(..., alias='date'),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    del caller
    with storage_errors(db):
        return availability.get_availability(db, doctor_id, day)
