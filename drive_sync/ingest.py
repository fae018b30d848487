"""Temp-file handoff from a decoded upload to the asset store.

The temp file is removed on every exit path except a successful
``register_asset`` call, after which the store owns (and may already have
moved) the bytes.
"""
import logging
import os
import tempfile
from pathlib import Path

from drive_sync.assets import AssetStore, AssetStoreError
from drive_sync.errors import RegistrationError, ResourceError
from drive_sync.models import DecodedPayload, IngestedAsset
from drive_sync.payload import truncate_utf8

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "drive-upload"
# NAME_MAX (255) less the mkstemp random part, the dash and ".tmp"
TEMP_STEM_BYTES = 200


def _discard(path: Path):
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("could not remove temp file %s: %s", path, e)


def allocate_temp_file(file_name: str, temp_dir: Path) -> tuple[int, Path]:
    stem = truncate_utf8(Path(file_name).stem, TEMP_STEM_BYTES) if file_name else ""
    prefix = f"{stem or FALLBACK_PREFIX}-"
    try:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=str(temp_dir))
    except OSError as e:
        logger.error("temp file allocation failed in %s: %s", temp_dir, e)
        raise ResourceError("temp-allocation-failed", "Unable to create temporary file.") from e
    return fd, Path(name)


def write_temp_file(fd: int, path: Path, content: bytes):
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
    except OSError as e:
        logger.error("temp file write failed %s: %s", path, e)
        raise ResourceError("write-failed", "Unable to write temporary file.") from e


def ingest(decoded: DecodedPayload, store: AssetStore, temp_dir: Path) -> IngestedAsset:
    fd, temp_path = allocate_temp_file(decoded.file_name, temp_dir)
    try:
        write_temp_file(fd, temp_path, decoded.content)
        asset_id = store.register_asset(
            temp_path,
            decoded.file_name or temp_path.name,
            decoded.mime_type,
            {"category": decoded.category},
        )
    except AssetStoreError as e:
        _discard(temp_path)
        logger.warning(
            "asset registration failed: file=%s mime=%s status=%s code=%s: %s",
            decoded.file_name,
            decoded.mime_type,
            e.status,
            e.code,
            e.message,
        )
        raise RegistrationError(e.message, code=e.code, status_code=e.status or 500) from e
    except BaseException:
        _discard(temp_path)
        raise

    try:
        url = store.get_public_url(asset_id)
    except Exception:
        logger.warning("url lookup failed for asset %s", asset_id, exc_info=True)
        url = None

    logger.info(
        "asset registered: id=%s file=%s mime=%s category=%s size=%s",
        asset_id,
        decoded.file_name,
        decoded.mime_type,
        decoded.category,
        len(decoded.content),
    )
    return IngestedAsset(asset_id=asset_id, public_url=url or None, category=decoded.category)
