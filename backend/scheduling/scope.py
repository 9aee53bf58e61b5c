"""Caller-bound restriction shared by every appointment read and ownership check.

A scope is built once from the authenticated caller. Patients are pinned to their own
patient id and doctors to their own doctor id; nurses are bound only by the filters they
pass. Any other role has no access to appointments.
"""

from dataclasses import dataclass, replace
from datetime import date

from sqlalchemy.orm import Query, Session

from backend.auth.caller import Caller
from backend.core.errors import ForbiddenError
from backend.models.appointment import Appointment

# The date field shadows the date class inside the dataclass body.
OptionalDate = date | None


@dataclass(frozen=True)
class AppointmentFilters:
    patient_id: int | None = None
    doctor_id: int | None = None
    date: OptionalDate = None
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    status: str | None = None
    appointment_type: str | None = None


@dataclass(frozen=True)
class AppointmentScope:
    patient_id: int | None = None
    doctor_id: int | None = None

    @classmethod
    def for_caller(cls, caller: Caller) -> 'AppointmentScope':
        if caller.is_patient:
            return cls(patient_id=caller.id)
        if caller.is_doctor:
            return cls(doctor_id=caller.id)
        if caller.is_nurse:
            return cls()
        raise ForbiddenError('Access denied.')

    def apply(self, query: Query) -> Query:
        if self.patient_id is not None:
            query = query.filter(Appointment.patient_id == self.patient_id)
        if self.doctor_id is not None:
            query = query.filter(Appointment.doctor_id == self.doctor_id)
        return query

    def permits(self, appointment: Appointment) -> bool:
        if self.patient_id is not None and appointment.patient_id != self.patient_id:
            return False
        if self.doctor_id is not None and appointment.doctor_id != self.doctor_id:
            return False
        return True

    def ensure_permits(self, appointment: Appointment) -> None:
        if not self.permits(appointment):
            raise ForbiddenError('Access denied.')

    def restrict(self, filters: AppointmentFilters) -> AppointmentFilters:
        """Drop reference filters the caller is not allowed to choose.

        Patients only ever see their own appointments, so both reference filters are
        discarded. Doctors keep a patient filter, which only narrows their own list.
        """
        if self.patient_id is not None:
            return replace(filters, patient_id=None, doctor_id=None)
        if self.doctor_id is not None:
            return replace(filters, doctor_id=None)
        return filters


def apply_filters(query: Query, filters: AppointmentFilters) -> Query:
    if filters.patient_id is not None:
        query = query.filter(Appointment.patient_id == filters.patient_id)
    if filters.doctor_id is not None:
        query = query.filter(Appointment.doctor_id == filters.doctor_id)

    # A complete range wins over a single day.
    if filters.start_date is not None and filters.end_date is not None:
        query = query.filter(Appointment.date >= filters.start_date, Appointment.date <= filters.end_date)
    elif filters.date is not None:
        query = query.filter(Appointment.date == filters.date)

    if filters.status:
        query = query.filter(Appointment.status == filters.status)
    if filters.appointment_type:
        query = query.filter(Appointment.appointment_type == filters.appointment_type)
    return query


def scoped_query(db: Session, scope: AppointmentScope, filters: AppointmentFilters | None = None) -> Query:
    query = scope.apply(db.query(Appointment))
    if filters is not None:
        query = apply_filters(query, scope.restrict(filters))
    return query.order_by(Appointment.date.asc(), Appointment.time.asc())
