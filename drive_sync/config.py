import os
import tempfile
from pathlib import Path

ADMIN_KEY = os.environ.get("DRIVE_SYNC_ADMIN_KEY", "")
DATA_DIR = Path(os.environ.get("DRIVE_SYNC_DATA_DIR", "/var/lib/drive-sync")).resolve()
TEMP_DIR = Path(os.environ.get("DRIVE_SYNC_TEMP_DIR", tempfile.gettempdir())).resolve()
MEDIA_DIR = DATA_DIR / "media"
TOKEN_FILE = DATA_DIR / "_sync_token.json"
PUBLIC_URL = os.environ.get("DRIVE_SYNC_PUBLIC_URL", "").rstrip("/")
MAX_MB = int(os.environ.get("DRIVE_SYNC_MAX_MB", "25"))
MAX_BYTES = MAX_MB * 1024 * 1024
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

API_NAMESPACE = "/drive-sync/v1"

_DEFAULT_ALLOWED_MIME = (
    "image/jpeg,image/png,image/gif,image/webp,image/heic,"
    "application/pdf,video/mp4,video/quicktime,audio/mpeg,text/plain"
)


def _resolve_allowed_mime() -> frozenset[str]:
    raw = os.environ.get("DRIVE_SYNC_ALLOWED_MIME") or _DEFAULT_ALLOWED_MIME
    return frozenset(x.strip().lower() for x in raw.split(",") if x.strip())


ALLOWED_MIME = _resolve_allowed_mime()

if not ADMIN_KEY:
    raise RuntimeError("DRIVE_SYNC_ADMIN_KEY is required")
