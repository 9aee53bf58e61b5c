import logging
from contextlib import contextmanager
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config
from backend.core.errors import StorageUnavailableError


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

logger = logging.getLogger(__name__)

ACTIVE_SLOT_INDEX_NAME = 'uq_appointments_active_slot'

_schema_lock = Lock()
_appointment_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db):
    """Roll back and report database failures as StorageUnavailableError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database operation failed")
        raise StorageUnavailableError() from exc


def ensure_appointment_schema(bind=None) -> None:
    """Bring an existing appointments table up to date.

    Tables created by ``create_all`` already carry every column and index. Older databases
    get the missing columns added and, most importantly, the partial unique index that
    stops two active bookings from sharing a doctor, date and time.
    """
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(bind)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('appointment_type', "ALTER TABLE appointments ADD COLUMN appointment_type VARCHAR(32) DEFAULT 'consultation'"),
            ('duration_minutes', 'ALTER TABLE appointments ADD COLUMN duration_minutes INTEGER DEFAULT 30'),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('reminder_sent', 'ALTER TABLE appointments ADD COLUMN reminder_sent BOOLEAN DEFAULT FALSE'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date ON appointments(doctor_id, date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_patient_date ON appointments(patient_id, date)')
            )
            connection.execute(
                text(
                    f'CREATE UNIQUE INDEX IF NOT EXISTS {ACTIVE_SLOT_INDEX_NAME} '
                    "ON appointments(doctor_id, date, time) WHERE status IN ('scheduled', 'confirmed')"
                )
            )

        _appointment_schema_checked = True
