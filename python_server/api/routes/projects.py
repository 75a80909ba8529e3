from fastapi import APIRouter, HTTPException, Request

from models.schemas import SaveProjectRequest
from services.errors import GenerationBusyError, PersistenceError
from utils.logger import server_logger

router = APIRouter()


def _storage_error(action: str, e: PersistenceError) -> HTTPException:
    server_logger.error(f"Project {action} failed: {e}")
    return HTTPException(status_code=503, detail={"code": e.code, "message": f"Failed to {action} project: {e}"})


@router.get("")
async def list_projects(request: Request):
    """Saved projects of the signed-in identity only."""
    state = request.app.state
    try:
        projects = state.projects.list_projects(state.identity.scope())
    except PersistenceError as e:
        raise _storage_error("list", e)
    return {"status": "success", "projects": [p.model_dump() for p in projects]}


@router.post("")
async def save_project(req: SaveProjectRequest, request: Request):
    state = request.app.state
    workspace = state.workspace
    try:
        project = state.projects.save_project(
            state.identity.scope(),
            workspace.files.to_list(),
            workspace.messages,
            name=req.name,
            description=req.description,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise _storage_error("save", e)
    return {"status": "success", "message": f'Extension "{project.name}" saved!', "project": project.model_dump()}


@router.post("/{project_id}/load")
async def load_project(project_id: str, request: Request):
    state = request.app.state
    try:
        project = state.projects.get_project(state.identity.scope(), project_id)
        if project is None:
            raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
        state.workspace.restore(project)
    except PersistenceError as e:
        raise _storage_error("load", e)
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail={"code": e.code, "message": str(e)})
    return {"status": "success", "project": project.model_dump()}


@router.delete("/{project_id}")
async def delete_project(project_id: str, request: Request):
    state = request.app.state
    try:
        deleted = state.projects.delete_project(state.identity.scope(), project_id)
    except PersistenceError as e:
        raise _storage_error("delete", e)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return {"status": "success"}
