from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from models.schemas import SelectFileRequest
from services.archive_svc import ARCHIVE_NAME, build_archive

router = APIRouter()


@router.get("")
async def list_files(request: Request):
    workspace = request.app.state.workspace
    return {
        "files": [{"filename": f.filename, "size": len(f.content)} for f in workspace.files],
        "selected": workspace.selection.selected,
    }


@router.get("/content")
async def get_file(filename: str, request: Request):
    found = request.app.state.workspace.files.find(filename)
    if found is None:
        raise HTTPException(status_code=404, detail=f"File not found: {filename}")
    return found.model_dump()


@router.post("/select")
async def select_file(req: SelectFileRequest, request: Request):
    workspace = request.app.state.workspace
    if not workspace.select_file(req.filename):
        raise HTTPException(status_code=404, detail=f"File not found: {req.filename}")
    return {"status": "success", "selected": workspace.selection.selected}


@router.get("/download")
async def download_files(request: Request):
    """Every file of the current set in one zip."""
    try:
        data = build_archive(request.app.state.workspace.files)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{ARCHIVE_NAME}"'},
    )
