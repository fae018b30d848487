from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from drive_sync.errors import DriveSyncError
from drive_sync.models import DryRunAck, IngestedAsset


def error_response(exc: DriveSyncError) -> JSONResponse:
    return JSONResponse({"code": exc.code, "message": exc.message}, status_code=exc.status_code)


def dry_run_response(ack: DryRunAck) -> JSONResponse:
    return JSONResponse({"message": ack.message}, status_code=202)


def created_response(asset: IngestedAsset) -> JSONResponse:
    return JSONResponse(
        {"attachment_id": asset.asset_id, "url": asset.public_url, "category": asset.category},
        status_code=201,
    )


async def _drive_sync_error_handler(request: Request, exc: DriveSyncError):
    return error_response(exc)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(DriveSyncError, _drive_sync_error_handler)
