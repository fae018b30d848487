from fastapi import APIRouter, Depends, Header, Request

from drive_sync.auth import auth_admin_key
from drive_sync.config import API_NAMESPACE
from drive_sync.deps import get_token_store
from drive_sync.tokens import TokenProvider, ensure_token, regenerate_token

router = APIRouter(prefix=f"{API_NAMESPACE}/settings", tags=["settings"])


@router.get("")
def api_settings(
    request: Request,
    x_admin_key: str | None = Header(default=None),
    tokens: TokenProvider = Depends(get_token_store),
):
    auth_admin_key(x_admin_key)
    return {
        "endpoint": str(request.url_for("api_upload")),
        "token": ensure_token(tokens),
    }


@router.post("/regenerate-token")
def api_regenerate_token(
    x_admin_key: str | None = Header(default=None),
    tokens: TokenProvider = Depends(get_token_store),
):
    auth_admin_key(x_admin_key)
    return {"ok": True, "token": regenerate_token(tokens)}
