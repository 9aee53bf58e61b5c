import os
from datetime import date, datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.auth.caller import Caller  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.patient import Patient  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.models.working_hours import DoctorWorkingHours  # noqa: E402,F401


@pytest.fixture
def session_factory():
    engine = create_engine('sqlite:///:memory:')
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clinic(db):
    patient_p = Patient(name='Pat Example', dob=date(1990, 4, 2), gender='female', contact='555-0100')
    patient_q = Patient(name='Quinn Example', dob=date(1985, 9, 12), gender='male', contact='555-0101')
    db.add_all([patient_p, patient_q])
    db.flush()

    doctor_a = User(name='Dr. Adams', email='adams@clinic.test', role='doctor', specialization='Cardiology')
    doctor_b = User(name='Dr. Brown', email='brown@clinic.test', role='doctor', specialization='Dermatology')
    nurse = User(name='Nurse Nolan', email='nolan@clinic.test', role='nurse')
    lab = User(name='Lab Lee', email='lee@clinic.test', role='lab')
    patient_user = User(name='Pat Example', email='pat@clinic.test', role='patient', patient_id=patient_p.id)
    db.add_all([doctor_a, doctor_b, nurse, lab, patient_user])
    db.commit()

    return SimpleNamespace(
        patient_p=patient_p,
        patient_q=patient_q,
        doctor_a=doctor_a,
        doctor_b=doctor_b,
        nurse_user=nurse,
        lab_user=lab,
        patient_user=patient_user,
        doctor_a_caller=Caller(id=doctor_a.id, role='doctor'),
        doctor_b_caller=Caller(id=doctor_b.id, role='doctor'),
        nurse=Caller(id=nurse.id, role='nurse'),
        lab=Caller(id=lab.id, role='lab'),
        patient=Caller(id=patient_p.id, role='patient'),
        other_patient=Caller(id=patient_q.id, role='patient'),
    )


@pytest.fixture
def make_appointment(db):
    """Insert an appointment directly, bypassing booking rules."""

    def _make(patient, doctor, day, slot='10:00', status='scheduled', **fields):
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            date=day,
            time=slot,
            reason=fields.pop('reason', 'Check-up'),
            status=status,
            created_at=datetime(2024, 1, 1, 8, 0),
            updated_at=datetime(2024, 1, 1, 8, 0),
            **fields,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make
