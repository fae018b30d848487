import hmac
import logging

from drive_sync.config import ADMIN_KEY
from drive_sync.errors import AuthError
from drive_sync.tokens import TokenProvider

logger = logging.getLogger(__name__)


def _equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def authenticate(provided: str | None, stored: str | None) -> bool:
    if not provided or not stored:
        return False
    return _equal(stored, provided)


def require_sync_token(x_drive_sync_token: str | None, tokens: TokenProvider):
    if not authenticate(x_drive_sync_token, tokens.get()):
        logger.warning("upload rejected: invalid or missing sync token")
        raise AuthError("Invalid or missing sync token.")


def auth_admin_key(x_admin_key: str | None):
    if not x_admin_key or not _equal(ADMIN_KEY, x_admin_key):
        raise AuthError("Invalid or missing admin key.", code="invalid-admin-key")
