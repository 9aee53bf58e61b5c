from datetime import date, timedelta

import pytest

from backend.core.errors import NotFoundError
from backend.routes.availability_routes import (
    AvailabilityResponse,
    get_doctor_availability,
    list_appointment_types,
    list_doctors,
)


def test_list_appointment_types_covers_every_type() -> None:
    options = list_appointment_types()

    assert [option.appointment_type for option in options] == [
        'consultation', 'follow-up', 'emergency', 'routine-check', 'vaccination', 'other',
    ]
    assert {option.duration_minutes for option in options} == {30}
    assert options[0].min_duration_minutes == 15
    assert options[0].max_duration_minutes == 120


def test_list_doctors_returns_only_doctors_sorted_by_name(db, clinic) -> None:
    doctors = list_doctors(caller=clinic.patient, db=db)

    assert [doctor.name for doctor in doctors] == ['Dr. Adams', 'Dr. Brown']


def test_get_doctor_availability_serializes_slots(db, clinic, make_appointment) -> None:
    day = date.today() + timedelta(days=2)
    make_appointment(clinic.patient_p, clinic.doctor_a, day, '13:00', status='confirmed')

    response = AvailabilityResponse.model_validate(
        get_doctor_availability(clinic.doctor_a.id, day=day, caller=clinic.patient, db=db)
    )

    assert response.date == day
    assert response.doctor.name == 'Dr. Adams'
    assert '13:00' not in response.available_slots
    assert '13:30' in response.available_slots
    assert response.working_hours.end == '17:00'


def test_get_doctor_availability_for_unknown_doctor(db, clinic) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        get_doctor_availability(9999, day=date.today(), caller=clinic.nurse, db=db)

    assert exception_info.value.status_code == 404
