from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter()


@router.get("/preview", response_class=HTMLResponse)
async def get_preview(request: Request):
    """Composed preview document; the client renders it in a sandboxed iframe."""
    return HTMLResponse(content=request.app.state.preview.document)


@router.get("/preview/permissions")
async def get_permissions(request: Request):
    return {"permissions": request.app.state.preview.permissions}
