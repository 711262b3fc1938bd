"""
Static front-end routes.
The index page is never cached; every other asset is cached for a long time.
Unknown paths fall back to the index so the client side router can handle them.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..config import Settings
from ..dependencies import get_settings
from ..utils.validation import safe_static_path

router = APIRouter()

INDEX_FILE = "index.html"


def _index_response(settings: Settings) -> FileResponse:
    index_path = Path(settings.static_dir) / INDEX_FILE
    if not index_path.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(index_path, headers={"Cache-Control": "no-cache"})


@router.get("/", include_in_schema=False)
async def index(settings: Settings = Depends(get_settings)):
    return _index_response(settings)


@router.get("/{file_path:path}", include_in_schema=False)
async def static_file(file_path: str, settings: Settings = Depends(get_settings)):
    path = safe_static_path(settings.static_dir, file_path)
    if path is None:
        raise HTTPException(status_code=404, detail="Not found")
    if path.is_file() and path.name != INDEX_FILE:
        return FileResponse(
            path, headers={"Cache-Control": f"max-age={settings.static_max_age}"}
        )
    return _index_response(settings)
