from fastapi import APIRouter, Depends

from backend.auth.caller import Caller
from backend.auth.dependencies import get_current_caller

router = APIRouter(tags=['auth'])


@router.get("/me")
def me(caller: Caller = Depends(get_current_caller)):
    return {"id": caller.id, "role": caller.role}
