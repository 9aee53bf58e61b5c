"""Free slot calculation for a doctor's day.

Slots are fixed-size start times walked from the start of the working window. A booking
only blocks the slot whose start time equals its own, whatever its duration.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from backend.core import config
from backend.models.appointment import ACTIVE_STATUSES, Appointment
from backend.scheduling import directory
from backend.scheduling.working_hours import WorkingHours, format_slot_time, parse_slot_time

logger = logging.getLogger(__name__)


def iterate_slot_starts(hours: WorkingHours, slot_minutes: int) -> list[time]:
    slots: list[time] = []
    current = datetime.combine(date.min, hours.start)
    end = datetime.combine(date.min, hours.end)

    while current < end:
        slots.append(current.time())
        current += timedelta(minutes=slot_minutes)

    return slots


def compute_available_slots(
    hours: WorkingHours,
    booked_times: Iterable[str],
    slot_minutes: int | None = None,
) -> list[str]:
    slot_minutes = slot_minutes or config.SLOT_DURATION_MINUTES
    booked = {parse_slot_time(value) for value in booked_times}

    return [
        format_slot_time(slot_time)
        for slot_time in iterate_slot_starts(hours, slot_minutes)
        if not hours.is_break(slot_time) and slot_time not in booked
    ]


def get_booked_times(db: Session, doctor_id: int, day: date) -> set[str]:
    rows = db.query(Appointment.time).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == day,
        Appointment.status.in_(ACTIVE_STATUSES),
    ).all()
    return {booked_time for (booked_time,) in rows}


def get_availability(db: Session, doctor_id: int, day: date) -> dict:
    doctor = directory.get_doctor(db, doctor_id)
    hours = directory.get_working_hours(db, doctor.id)
    slots = compute_available_slots(hours, get_booked_times(db, doctor.id, day))

    logger.debug('Computed %d free slots for doctor %s on %s', len(slots), doctor.id, day)

    return {
        'doctor': {
            'id': doctor.id,
            'name': doctor.name,
            'specialization': doctor.specialization,
        },
        'date': day,
        'available_slots': slots,
        'working_hours': hours.as_dict(),
    }
