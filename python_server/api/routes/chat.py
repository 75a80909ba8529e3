from fastapi import APIRouter, HTTPException, Request

from models.schemas import SendMessageRequest
from services.errors import CredentialMissingError, GenerationBusyError, GenerationError
from utils.logger import server_logger

router = APIRouter()


def _conversation(workspace) -> dict:
    return {
        "messages": [m.model_dump() for m in workspace.messages],
        "busy": workspace.busy,
        "last_error": workspace.last_error,
    }


@router.get("/messages")
async def get_messages(request: Request):
    return _conversation(request.app.state.workspace)


@router.post("/send")
async def send_message(req: SendMessageRequest, request: Request):
    """Append the user message and run one generation round over the whole conversation."""
    state = request.app.state
    workspace = state.workspace
    try:
        files = await workspace.send_message(req.message, state.adapter_factory, new_session=req.new_session)
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)})
    except CredentialMissingError as e:
        raise HTTPException(status_code=400, detail={"code": e.code, "message": str(e)})
    except GenerationError as e:
        server_logger.error(f"Generation failed: {e}")
        raise HTTPException(status_code=502, detail={"code": e.code, "message": str(e)})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = _conversation(workspace)
    result["status"] = "success"
    result["files"] = [f.model_dump() for f in files]
    return result


@router.post("/reset")
async def reset_conversation(request: Request):
    workspace = request.app.state.workspace
    try:
        workspace.start_new_session()
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)})
    return _conversation(workspace)
