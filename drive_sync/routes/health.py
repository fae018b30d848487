"""Health check endpoint."""
from pathlib import Path

from fastapi import APIRouter

from drive_sync.config import MEDIA_DIR, TEMP_DIR

router = APIRouter()


def _writable(d: Path) -> str:
    try:
        d.mkdir(parents=True, exist_ok=True)
        probe = d / ".health_check"
        probe.write_text("ok")
        probe.unlink()
    except OSError as e:
        return f"error: {e}"
    return "ok"


@router.get("/health")
def health():
    checks = {"app": "ok", "temp": _writable(TEMP_DIR), "media": _writable(MEDIA_DIR)}
    if any(v != "ok" for v in checks.values()):
        return {"status": "unhealthy", "checks": checks}
    return {"status": "ok", "checks": checks}
