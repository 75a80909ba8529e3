from fastapi import APIRouter, HTTPException, Request

from models.schemas import UserProfile
from services.errors import PersistenceError

router = APIRouter()


@router.get("/me")
async def get_current_user(request: Request):
    user = request.app.state.identity.current()
    return {"user": user.model_dump() if user else None}


@router.post("/login")
async def login(profile: UserProfile, request: Request):
    """Record the profile returned by the client-side sign-in."""
    try:
        user = request.app.state.identity.sign_in(profile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail={"code": e.code, "message": str(e)})
    return {"status": "success", "user": user.model_dump()}


@router.post("/logout")
async def logout(request: Request):
    try:
        request.app.state.identity.sign_out()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail={"code": e.code, "message": str(e)})
    return {"status": "success"}
