"""Serve registered media files.

Routes:
  GET /media/{path}  file as stored by the local asset store, with its recorded MIME type
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from drive_sync.assets import LocalAssetStore
from drive_sync.deps import get_asset_store

router = APIRouter(tags=["media"])


@router.get("/media/{path:path}")
def serve_media(path: str, store: LocalAssetStore = Depends(get_asset_store)):
    record = store.find_by_path(path)
    f = store.resolve_file(path) if record else None
    if f is None:
        raise HTTPException(status_code=404, detail="file not found")
    return FileResponse(f, media_type=record.get("mimeType") or "application/octet-stream")
