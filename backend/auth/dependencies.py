import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.auth.caller import PATIENT_ROLE, USER_ROLES, Caller
from backend.database import SessionLocal
from backend.models.user import User

security = HTTPBearer()


def resolve_caller(user: User) -> Caller:
    if user.role not in USER_ROLES:
        raise HTTPException(status_code=403, detail="Unknown user role")

    if user.role == PATIENT_ROLE:
        if user.patient_id is None:
            raise HTTPException(status_code=403, detail="Patient profile not linked to this account")
        return Caller(id=user.patient_id, role=user.role)

    return Caller(id=user.id, role=user.role)


def get_current_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Caller:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token subject")

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
    finally:
        db.close()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return resolve_caller(user)
