from fastapi import APIRouter, HTTPException, Request

from models.schemas import ApiKeyRequest
from services.errors import PersistenceError
from utils.logger import server_logger

router = APIRouter()


@router.get("/api_key")
async def get_api_key_status(request: Request):
    """Never returns the key itself, only whether one is set and a masked form."""
    return request.app.state.credentials.describe()


@router.post("/api_key")
async def save_api_key(req: ApiKeyRequest, request: Request):
    """Save a personal Gemini key; an empty key reverts to the server default."""
    credentials = request.app.state.credentials
    try:
        credentials.set_user_key(req.api_key)
    except PersistenceError as e:
        server_logger.error(f"Failed to save API key: {e}")
        raise HTTPException(status_code=503, detail={"code": e.code, "message": "Failed to save key."})
    result = credentials.describe()
    result["status"] = "success"
    return result
