from datetime import datetime, timezone

import pytest

from backend.core.errors import InvalidTransitionError, ValidationError
from backend.models.appointment import APPOINTMENT_STATUSES, Appointment
from backend.scheduling.lifecycle import (
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    apply_transition,
    can_transition,
    validate_status,
)

STALE_TIMESTAMP = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)


def _appointment(status: str) -> Appointment:
    return Appointment(id=1, status=status, updated_at=STALE_TIMESTAMP)


@pytest.mark.parametrize(
    ('current', 'requested'),
    [
        ('scheduled', 'confirmed'),
        ('scheduled', 'cancelled'),
        ('confirmed', 'in-progress'),
        ('confirmed', 'cancelled'),
        ('in-progress', 'completed'),
    ],
)
def test_listed_transitions_are_accepted(current: str, requested: str) -> None:
    appointment = apply_transition(_appointment(current), requested)

    assert appointment.status == requested
    assert appointment.updated_at > STALE_TIMESTAMP


def test_scheduled_cannot_skip_to_in_progress() -> None:
    appointment = _appointment('scheduled')

    with pytest.raises(InvalidTransitionError) as exception_info:
        apply_transition(appointment, 'in-progress')

    assert exception_info.value.current_status == 'scheduled'
    assert exception_info.value.requested_status == 'in-progress'
    assert exception_info.value.detail == 'Cannot change status from scheduled to in-progress.'
    assert appointment.status == 'scheduled'


@pytest.mark.parametrize('terminal', sorted(TERMINAL_STATUSES))
@pytest.mark.parametrize('requested', APPOINTMENT_STATUSES)
def test_terminal_statuses_have_no_way_out(terminal: str, requested: str) -> None:
    with pytest.raises(InvalidTransitionError):
        apply_transition(_appointment(terminal), requested)


def test_terminal_statuses() -> None:
    assert TERMINAL_STATUSES == {'completed', 'cancelled', 'no-show'}


def test_no_show_is_declared_but_unreachable() -> None:
    assert 'no-show' in STATUS_TRANSITIONS
    assert not any('no-show' in targets for targets in STATUS_TRANSITIONS.values())


def test_can_transition_rejects_unknown_current_status() -> None:
    assert not can_transition('archived', 'confirmed')


def test_validate_status_normalizes_input() -> None:
    assert validate_status(' Confirmed ') == 'confirmed'


@pytest.mark.parametrize('value', [None, '', 'done'])
def test_validate_status_rejects_unknown_values(value) -> None:
    with pytest.raises(ValidationError) as exception_info:
        validate_status(value)

    assert exception_info.value.status_code == 400
