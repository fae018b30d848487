import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from drive_sync.assets import AssetStore
from drive_sync.auth import require_sync_token
from drive_sync.config import API_NAMESPACE
from drive_sync.deps import get_asset_store, get_temp_dir, get_token_store
from drive_sync.errors import ValidationError
from drive_sync.ingest import ingest
from drive_sync.models import DryRunAck
from drive_sync.payload import decode, parse_upload_request
from drive_sync.responses import created_response, dry_run_response
from drive_sync.tokens import TokenProvider

router = APIRouter(prefix=API_NAMESPACE, tags=["upload"])
logger = logging.getLogger(__name__)


@router.post("/upload", status_code=201)
async def api_upload(
    request: Request,
    x_drive_sync_token: str | None = Header(default=None),
    tokens: TokenProvider = Depends(get_token_store),
    store: AssetStore = Depends(get_asset_store),
    temp_dir: Path = Depends(get_temp_dir),
):
    require_sync_token(x_drive_sync_token, tokens)
    try:
        raw = await request.json()
    except ValueError as e:
        raise ValidationError("invalid-request", "Request body must be valid JSON.") from e

    result = decode(parse_upload_request(raw))
    if isinstance(result, DryRunAck):
        logger.info("dry run acknowledged")
        return dry_run_response(result)

    asset = await run_in_threadpool(ingest, result, store, temp_dir)
    return created_response(asset)
