from fastapi import APIRouter, HTTPException, Request

from services.errors import GenerationBusyError, TemplateNotFoundError
from utils.logger import server_logger

router = APIRouter()


@router.get("")
async def list_templates(request: Request):
    """List available starter templates."""
    templates = request.app.state.templates.list_templates()
    return {"status": "success", "templates": [t.model_dump(exclude={"files"}) for t in templates]}


@router.post("/{template_id}/apply")
async def apply_template(template_id: str, request: Request):
    """Start a new session from a template."""
    state = request.app.state
    try:
        template = state.templates.get_template(template_id)
        state.workspace.apply_template(template)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)})
    except (OSError, ValueError) as e:
        server_logger.error(f"Failed to load template {template_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Template could not be loaded: {e}")

    return {
        "status": "success",
        "messages": [m.model_dump() for m in state.workspace.messages],
        "files": [f.model_dump() for f in state.workspace.files],
    }
