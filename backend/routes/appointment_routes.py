from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from backend.auth.caller import Caller
from backend.auth.dependencies import get_current_caller
from backend.database import get_db, storage_errors
from backend.scheduling import appointments, statistics
from backend.scheduling.scope import AppointmentFilters

router = APIRouter(tags=['appointments'])

# Field names below shadow the date class inside model bodies.
OptionalDate = date | None


def _strip_lower(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip().lower()


class CreateAppointmentRequest(BaseModel):
    patient_id: int
    doctor_id: int | None = None
    date: date
    time: str
    reason: str
    appointment_type: str | None = Field(default=None, alias='type')
    duration_minutes: int | None = Field(default=None, alias='duration')
    notes: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('time', 'reason')
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator('appointment_type')
    @classmethod
    def normalize_appointment_type(cls, value: str | None) -> str | None:
        return _strip_lower(value)


class UpdateAppointmentRequest(BaseModel):
    date: OptionalDate = None
    time: str | None = None
    reason: str | None = None
    appointment_type: str | None = Field(default=None, alias='type')
    duration_minutes: int | None = Field(default=None, alias='duration')
    notes: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    @field_validator('appointment_type')
    @classmethod
    def normalize_appointment_type(cls, value: str | None) -> str | None:
        return _strip_lower(value)


class StatusChangeRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def normalize_status(cls, value: str) -> str:
        return value.strip().lower()


class AppointmentPatientResponse(BaseModel):
    id: int
    name: str
    dob: OptionalDate = None
    gender: str | None = None
    contact: str | None = None

    class Config:
        from_attributes = True


class AppointmentDoctorResponse(BaseModel):
    id: int
    name: str
    email: str | None = None
    specialization: str | None = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    patient: AppointmentPatientResponse
    doctor: AppointmentDoctorResponse
    date: date
    time: str
    duration_minutes: int
    reason: str
    appointment_type: str
    status: str
    notes: str | None = None
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StatusChangeResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class TodayStatisticsResponse(BaseModel):
    total: int
    by_status: dict[str, int]


class MonthlyCountResponse(BaseModel):
    month: str
    count: int


class StatisticsResponse(BaseModel):
    today: TodayStatisticsResponse
    upcoming: int
    status_breakdown: dict[str, int]
    monthly_trend: list[MonthlyCountResponse]


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    patient_id: int | None = Query(default=None),
    doctor_id: int | None = Query(default=None),
    date: date | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status: str | None = Query(default=None),
    appointment_type: str | None = Query(default=None, alias='type'),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    filters = AppointmentFilters(
        patient_id=patient_id,
        doctor_id=doctor_id,
        date=date,
        start_date=start_date,
        end_date=end_date,
        status=_strip_lower(status),
        appointment_type=_strip_lower(appointment_type),
    )
    with storage_errors(db):
        return appointments.list_appointments(db, caller, filters)


@router.get('/today', response_model=list[AppointmentResponse])
def list_today_appointments(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    with storage_errors(db):
        return appointments.list_today(db, caller)


@router.get('/upcoming', response_model=list[AppointmentResponse])
def list_upcoming_appointments(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    with storage_errors(db):
        return appointments.list_upcoming(db, caller)


@router.get('/stats/overview', response_model=StatisticsResponse)
def get_statistics_overview(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    with storage_errors(db):
        return statistics.get_statistics(db, caller)


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    with storage_errors(db):
        return appointments.get_appointment(db, caller, appointment_id)


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    with storage_errors(db):
        return appointments.create_appointment(
            db,
            caller,
            patient_id=data.patient_id,
            appointment_date=data.date,
            appointment_time=data.time,
            reason=data.reason,
            doctor_id=data.doctor_id,
            appointment_type=data.appointment_type,
            duration_minutes=data.duration_minutes,
            notes=data.notes,
        )


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    with storage_errors(db):
        return appointments.update_appointment(db, caller, appointment_id, data.model_dump(exclude_unset=True))


@router.patch('/{appointment_id}/status', response_model=StatusChangeResponse)
def change_appointment_status(
    appointment_id: int,
    data: StatusChangeRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    with storage_errors(db):
        appointment = appointments.change_status(db, caller, appointment_id, data.status)
        return StatusChangeResponse(
            message=f'Appointment {appointment.status} successfully',
            appointment=AppointmentResponse.model_validate(appointment),
        )


@router.delete('/{appointment_id}')
def delete_appointment(
    appointment_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    with storage_errors(db):
        appointments.delete_appointment(db, caller, appointment_id)
    return {'message': 'Appointment deleted successfully'}
