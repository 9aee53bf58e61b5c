import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from backend.auth import dependencies, jwt_handler
from backend.auth.caller import Caller
from backend.models.user import User
from backend.routes.auth_routes import me


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_access_token_round_trip() -> None:
    token = jwt_handler.create_access_token('adams@clinic.test', role='doctor')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == 'adams@clinic.test'
    assert payload['role'] == 'doctor'


def test_resolve_caller_uses_patient_profile_for_patients() -> None:
    user = User(id=12, name='Pat', role='patient', patient_id=4)

    assert dependencies.resolve_caller(user) == Caller(id=4, role='patient')


def test_resolve_caller_uses_user_id_for_staff() -> None:
    user = User(id=3, name='Nurse', role='nurse')

    assert dependencies.resolve_caller(user) == Caller(id=3, role='nurse')


def test_resolve_caller_rejects_unlinked_patient() -> None:
    with pytest.raises(HTTPException) as exception_info:
        dependencies.resolve_caller(User(id=12, name='Pat', role='patient'))

    assert exception_info.value.status_code == 403


def test_get_current_caller_loads_user_from_token(
    session_factory,
    clinic,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(dependencies, 'SessionLocal', session_factory)

    caller = dependencies.get_current_caller(_credentials(jwt_handler.create_access_token('pat@clinic.test')))

    assert caller == Caller(id=clinic.patient_p.id, role='patient')
    assert me(caller=caller) == {'id': clinic.patient_p.id, 'role': 'patient'}


def test_get_current_caller_rejects_unknown_user(session_factory, clinic, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(dependencies, 'SessionLocal', session_factory)

    with pytest.raises(HTTPException) as exception_info:
        dependencies.get_current_caller(_credentials(jwt_handler.create_access_token('ghost@clinic.test')))

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'User not found'


def test_get_current_caller_rejects_bad_token() -> None:
    with pytest.raises(HTTPException) as exception_info:
        dependencies.get_current_caller(_credentials('not-a-token'))

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid token'
