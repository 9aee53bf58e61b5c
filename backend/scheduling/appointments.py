"""Booking, editing, status changes and scoped reads of appointments.

Every public function takes the request's session and the authenticated caller. Domain
failures are raised as ``backend.core.errors`` exceptions; storage failures are left to
propagate as ``SQLAlchemyError`` for the transport layer to translate.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.auth.caller import Caller
from backend.core import config
from backend.core.errors import ConflictError, ForbiddenError, NotFoundError, PastDateError, ValidationError
from backend.models.appointment import (
    ACTIVE_STATUSES,
    APPOINTMENT_STATUSES,
    APPOINTMENT_TYPES,
    DEFAULT_APPOINTMENT_TYPE,
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    Appointment,
)
from backend.scheduling import directory, lifecycle
from backend.scheduling.scope import AppointmentFilters, AppointmentScope, scoped_query
from backend.scheduling.working_hours import WorkingHours, format_slot_time, parse_slot_time

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_NOTES_LENGTH = 600
EDITABLE_FIELDS = frozenset({'date', 'time', 'reason', 'appointment_type', 'duration_minutes', 'notes'})


def normalize_slot_time(value: str | None) -> str:
    if not value:
        raise ValidationError('Appointment time is required.')
    try:
        return format_slot_time(parse_slot_time(value))
    except ValueError as exc:
        raise ValidationError('Invalid appointment time format. Use HH:MM.') from exc


def validate_reason(value: str | None) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValidationError('Reason is required.')
    return normalized


def validate_appointment_type(value: str | None) -> str:
    if value is None:
        return DEFAULT_APPOINTMENT_TYPE
    normalized = value.strip().lower()
    if normalized not in APPOINTMENT_TYPES:
        raise ValidationError(f'Invalid appointment type. Must be one of: {", ".join(APPOINTMENT_TYPES)}.')
    return normalized


def validate_duration(value: int | None) -> int:
    if value is None:
        return DEFAULT_DURATION_MINUTES
    if not MIN_DURATION_MINUTES <= value <= MAX_DURATION_MINUTES:
        raise ValidationError(
            f'Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes.'
        )
    return value


def validate_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValidationError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


def ensure_bookable(hours: WorkingHours, day: date, slot: str) -> None:
    if day < date.today():
        raise ValidationError('Appointment date cannot be in the past.')

    slot_time = parse_slot_time(slot)
    if hours.allows(slot_time):
        return
    if hours.is_break(slot_time):
        raise ValidationError('Appointment falls within the doctor\'s break.')
    raise ValidationError('Appointment is outside working hours.')


def find_conflicting_appointment(
    db: Session,
    doctor_id: int,
    day: date,
    slot: str,
    exclude_id: int | None = None,
) -> Appointment | None:
    query = db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == day,
        Appointment.time == slot,
        Appointment.status.in_(ACTIVE_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.first()


def ensure_slot_free(db: Session, doctor_id: int, day: date, slot: str, exclude_id: int | None = None) -> None:
    if find_conflicting_appointment(db, doctor_id, day, slot, exclude_id) is not None:
        logger.warning('Slot %s %s for doctor %s is already booked', day, slot, doctor_id)
        raise ConflictError('Time slot already booked.')


def _commit(db: Session, appointment: Appointment) -> Appointment:
    # The partial unique index catches a booking that raced past ensure_slot_free.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Concurrent booking rejected for doctor %s at %s %s',
                       appointment.doctor_id, appointment.date, appointment.time)
        raise ConflictError('Time slot already booked.') from exc
    db.refresh(appointment)
    return appointment


def _require_staff(caller: Caller, action: str) -> None:
    if not (caller.is_doctor or caller.is_nurse):
        raise ForbiddenError(f'Only doctors and nurses can {action} appointments.')


def create_appointment(
    db: Session,
    caller: Caller,
    patient_id: int | None,
    appointment_date: date | None,
    appointment_time: str | None,
    reason: str | None,
    doctor_id: int | None = None,
    appointment_type: str | None = None,
    duration_minutes: int | None = None,
    notes: str | None = None,
) -> Appointment:
    if not patient_id or appointment_date is None or not appointment_time or not (reason or '').strip():
        raise ValidationError('Patient ID, date, time, and reason are required.')

    scope = AppointmentScope.for_caller(caller)

    if doctor_id is None and caller.is_doctor:
        doctor_id = caller.id
    if doctor_id is None:
        raise ValidationError('Doctor ID is required.')

    slot = normalize_slot_time(appointment_time)
    appointment = Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        date=appointment_date,
        time=slot,
        reason=validate_reason(reason),
        appointment_type=validate_appointment_type(appointment_type),
        duration_minutes=validate_duration(duration_minutes),
        notes=validate_notes(notes),
        status='scheduled',
        reminder_sent=False,
    )
    scope.ensure_permits(appointment)

    directory.get_patient(db, patient_id)
    doctor = directory.get_doctor(db, doctor_id)
    ensure_bookable(directory.get_working_hours(db, doctor.id), appointment_date, slot)
    ensure_slot_free(db, doctor.id, appointment_date, slot)

    now = datetime.now(timezone.utc)
    appointment.created_at = now
    appointment.updated_at = now
    db.add(appointment)
    _commit(db, appointment)

    logger.info('Booked appointment %s: patient %s with doctor %s at %s %s',
                appointment.id, patient_id, doctor.id, appointment_date, slot)
    return appointment


def get_appointment(db: Session, caller: Caller, appointment_id: int) -> Appointment:
    scope = AppointmentScope.for_caller(caller)
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found.')
    scope.ensure_permits(appointment)
    return appointment


def update_appointment(db: Session, caller: Caller, appointment_id: int, changes: dict[str, Any]) -> Appointment:
    _require_staff(caller, 'edit')

    if 'status' in changes:
        raise ValidationError('Status cannot be edited directly. Use the status endpoint.')
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f'Unknown appointment fields: {", ".join(sorted(unknown))}.')

    appointment = get_appointment(db, caller, appointment_id)

    if changes.get('reason') is not None:
        appointment.reason = validate_reason(changes['reason'])
    if changes.get('appointment_type') is not None:
        appointment.appointment_type = validate_appointment_type(changes['appointment_type'])
    if changes.get('duration_minutes') is not None:
        appointment.duration_minutes = validate_duration(changes['duration_minutes'])
    if 'notes' in changes:
        appointment.notes = validate_notes(changes['notes'])

    new_date = changes.get('date') or appointment.date
    new_slot = normalize_slot_time(changes['time']) if changes.get('time') else appointment.time
    if (new_date, new_slot) != (appointment.date, appointment.time):
        ensure_bookable(directory.get_working_hours(db, appointment.doctor_id), new_date, new_slot)
        if appointment.status in ACTIVE_STATUSES:
            ensure_slot_free(db, appointment.doctor_id, new_date, new_slot, exclude_id=appointment.id)
        appointment.date = new_date
        appointment.time = new_slot

    appointment.updated_at = datetime.now(timezone.utc)
    _commit(db, appointment)

    logger.info('Updated appointment %s', appointment.id)
    return appointment


def change_status(db: Session, caller: Caller, appointment_id: int, new_status: str | None) -> Appointment:
    requested_status = lifecycle.validate_status(new_status)
    appointment = get_appointment(db, caller, appointment_id)

    previous_status = appointment.status
    lifecycle.apply_transition(appointment, requested_status)
    _commit(db, appointment)

    logger.info('Appointment %s moved from %s to %s by %s %s',
                appointment.id, previous_status, requested_status, caller.role, caller.id)
    return appointment


def delete_appointment(db: Session, caller: Caller, appointment_id: int) -> None:
    _require_staff(caller, 'delete')
    appointment = get_appointment(db, caller, appointment_id)

    if appointment.date <= date.today():
        raise PastDateError("Cannot delete past or today's appointments. Use cancel instead.")

    db.delete(appointment)
    db.commit()
    logger.info('Deleted appointment %s', appointment_id)


def _validate_filters(filters: AppointmentFilters) -> None:
    if filters.status and filters.status not in APPOINTMENT_STATUSES:
        raise ValidationError(f'Invalid status filter. Must be one of: {", ".join(APPOINTMENT_STATUSES)}.')
    if filters.appointment_type and filters.appointment_type not in APPOINTMENT_TYPES:
        raise ValidationError(f'Invalid type filter. Must be one of: {", ".join(APPOINTMENT_TYPES)}.')
    if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
        raise ValidationError('Start date must not be after end date.')


def list_appointments(db: Session, caller: Caller, filters: AppointmentFilters | None = None) -> list[Appointment]:
    filters = filters or AppointmentFilters()
    _validate_filters(filters)
    scope = AppointmentScope.for_caller(caller)
    return scoped_query(db, scope, filters).all()


def list_today(db: Session, caller: Caller) -> list[Appointment]:
    scope = AppointmentScope.for_caller(caller)
    return scoped_query(db, scope, AppointmentFilters(date=date.today())).all()


def list_upcoming(db: Session, caller: Caller) -> list[Appointment]:
    scope = AppointmentScope.for_caller(caller)
    return (
        scoped_query(db, scope)
        .filter(Appointment.date >= date.today(), Appointment.status.in_(ACTIVE_STATUSES))
        .limit(config.UPCOMING_LIMIT)
        .all()
    )
