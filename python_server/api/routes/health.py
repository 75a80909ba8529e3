from fastapi import APIRouter, Request
from datetime import datetime

router = APIRouter()

@router.get("/health_check")
async def health_check(request: Request):
    state = request.app.state
    return {
        "status": "healthy",
        "version": getattr(state, 'app_version', 'unknown'),
        "timestamp": datetime.now().isoformat(),
        "generation": {
            "provider": state.config.generation.provider,
            "model": state.config.generation.model,
            "busy": state.workspace.busy,
        },
        "features": {
            "live_preview": True,
            "templates": True,
            "saved_projects": True,
            "zip_download": True,
            "user_api_key": True,
        },
    }
