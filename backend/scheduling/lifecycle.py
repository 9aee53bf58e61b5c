import logging
from datetime import datetime, timezone

from backend.core.errors import InvalidTransitionError, ValidationError
from backend.models.appointment import APPOINTMENT_STATUSES, Appointment

logger = logging.getLogger(__name__)

# no-show has no inbound edge; it is reserved for an out-of-band expiry process.
STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    'scheduled': ('confirmed', 'cancelled'),
    'confirmed': ('in-progress', 'cancelled'),
    'in-progress': ('completed',),
    'completed': (),
    'cancelled': (),
    'no-show': (),
}

TERMINAL_STATUSES = frozenset(state for state, targets in STATUS_TRANSITIONS.items() if not targets)


def validate_status(value: str | None) -> str:
    normalized = (value or '').strip().lower()
    if normalized not in APPOINTMENT_STATUSES:
        raise ValidationError(f'Valid status is required. Must be one of: {", ".join(APPOINTMENT_STATUSES)}.')
    return normalized


def allowed_transitions(current_status: str) -> tuple[str, ...]:
    return STATUS_TRANSITIONS.get(current_status, ())


def can_transition(current_status: str, requested_status: str) -> bool:
    return requested_status in allowed_transitions(current_status)


def apply_transition(appointment: Appointment, requested_status: str) -> Appointment:
    """Move ``appointment`` to ``requested_status`` or raise InvalidTransitionError.

    The caller is responsible for committing; the record is only mutated on success.
    """
    current_status = appointment.status
    if not can_transition(current_status, requested_status):
        logger.warning(
            'Rejected transition of appointment %s from %s to %s',
            appointment.id, current_status, requested_status,
        )
        raise InvalidTransitionError(current_status, requested_status)

    appointment.status = requested_status
    appointment.updated_at = datetime.now(timezone.utc)
    return appointment
