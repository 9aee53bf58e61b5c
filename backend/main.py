import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import SchedulingError, StorageUnavailableError, error_response_handler
from backend.database import Base, engine, ensure_appointment_schema
from backend.models import appointment, patient, user, working_hours  # noqa: F401
from backend.routes import appointment_routes, auth_routes, availability_routes

app = FastAPI(title='Appointment Scheduling API')

app.add_exception_handler(SchedulingError, error_response_handler)
app.add_exception_handler(StorageUnavailableError, error_response_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Appointment Scheduling API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(appointment_routes.router, prefix='/appointments')
