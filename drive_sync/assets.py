from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Protocol
from urllib.parse import quote

from drive_sync.payload import cap_name_bytes

logger = logging.getLogger(__name__)

INDEX_FILE = "_assets.json"
# leaves room for the "-N" suffix added on name clashes
MAX_NAME_BYTES = 240

_IMAGE_SIGNATURES = {
    "image/jpeg": (b"\xff\xd8\xff",),
    "image/png": (b"\x89PNG\r\n\x1a\n",),
    "image/gif": (b"GIF87a", b"GIF89a"),
}

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "application/pdf": ".pdf",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "audio/mpeg": ".mp3",
    "text/plain": ".txt",
}


class AssetStoreError(Exception):
    def __init__(self, message: str, code: str = "upload-error", status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class AssetStore(Protocol):
    def register_asset(self, temp_path: Path, file_name: str, mime_type: str, metadata: dict) -> int: ...

    def get_public_url(self, asset_id: int) -> str | None: ...


def sniff_image_type(head: bytes) -> str | None:
    for mime, signatures in _IMAGE_SIGNATURES.items():
        if head.startswith(signatures):
            return mime
    if head.startswith(b"RIFF") and b"WEBP" in head[8:16]:
        return "image/webp"
    return None


def _sha256(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            chunk = f.read(1024 * 1024)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


class LocalAssetStore:
    """Media library on the local filesystem.

    Files are moved into ``<root>/YYYY/MM/`` and indexed in ``_assets.json``
    under sequential integer ids. A sideloaded temp file belongs to the store
    once ``register_asset`` returns.
    """

    def __init__(self, root: Path, public_url: str, allowed_mime: frozenset[str], max_bytes: int):
        self.root = Path(root).resolve()
        self.public_url = public_url.rstrip("/")
        self.allowed_mime = allowed_mime
        self.max_bytes = max_bytes
        self._lock = Lock()

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_FILE

    def load_index(self) -> dict:
        p = self.index_path
        if not p.exists():
            return {"next_id": 1, "assets": {}}
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.error("asset index unreadable: %s", p)
            raise
        if not isinstance(data, dict):
            raise ValueError(f"asset index is not an object: {p}")
        if not isinstance(data.get("assets"), dict):
            data["assets"] = {}
        if not isinstance(data.get("next_id"), int):
            data["next_id"] = max((int(k) for k in data["assets"]), default=0) + 1
        return data

    def _save_index(self, data: dict):
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".assets-", dir=str(self.root))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.index_path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_asset(self, asset_id: int) -> dict | None:
        return self.load_index()["assets"].get(str(asset_id))

    def find_by_path(self, rel_path: str) -> dict | None:
        for record in self.load_index()["assets"].values():
            if record.get("file") == rel_path:
                return record
        return None

    def _check(self, temp_path: Path, mime_type: str):
        if mime_type not in self.allowed_mime:
            raise AssetStoreError(
                f"Sorry, you are not allowed to upload this file type ({mime_type}).",
                code="unsupported-type",
                status=415,
            )
        size = temp_path.stat().st_size
        if size > self.max_bytes:
            raise AssetStoreError(
                f"File exceeds the maximum upload size ({self.max_bytes // (1024 * 1024)}MB).",
                code="file-too-large",
                status=413,
            )
        if mime_type.startswith("image/"):
            with temp_path.open("rb") as f:
                sniffed = sniff_image_type(f.read(64))
            if sniffed is not None and sniffed != mime_type:
                raise AssetStoreError(
                    f"File content is {sniffed} but was declared as {mime_type}.",
                    code="type-mismatch",
                    status=422,
                )

    def _target_name(self, file_name: str, mime_type: str) -> str:
        name = file_name or "drive-upload"
        if not Path(name).suffix and mime_type in _EXTENSIONS:
            name += _EXTENSIONS[mime_type]
        return cap_name_bytes(name, MAX_NAME_BYTES)

    def _unique_path(self, directory: Path, name: str) -> Path:
        stem, suffix = Path(name).stem, Path(name).suffix
        candidate = directory / name
        n = 1
        while candidate.exists():
            candidate = directory / f"{stem}-{n}{suffix}"
            n += 1
        return candidate

    def register_asset(self, temp_path: Path, file_name: str, mime_type: str, metadata: dict) -> int:
        temp_path = Path(temp_path)
        mime_type = mime_type.strip().lower()
        try:
            self._check(temp_path, mime_type)
        except OSError as e:
            raise AssetStoreError(f"Could not read uploaded file: {e.strerror or e}") from e

        now = datetime.now(timezone.utc)
        name = self._target_name(file_name, mime_type)
        with self._lock:
            target_dir = self.root / f"{now:%Y}" / f"{now:%m}"
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                target = self._unique_path(target_dir, name)
                shutil.move(str(temp_path), str(target))
            except OSError as e:
                raise AssetStoreError(f"The uploaded file could not be moved: {e.strerror or e}") from e

            try:
                data = self.load_index()
                asset_id = data["next_id"]
                data["next_id"] = asset_id + 1
                data["assets"][str(asset_id)] = {
                    "id": asset_id,
                    "file": target.relative_to(self.root).as_posix(),
                    "mimeType": mime_type,
                    "category": metadata.get("category", ""),
                    "title": metadata.get("title") or Path(name).stem,
                    "size": target.stat().st_size,
                    "sha256": _sha256(target),
                    "createdAt": now.isoformat(),
                }
                self._save_index(data)
            except (OSError, ValueError) as e:
                target.unlink(missing_ok=True)
                raise AssetStoreError("Could not update the media index.") from e
        logger.info("asset stored: id=%s file=%s", asset_id, target.relative_to(self.root).as_posix())
        return asset_id

    def get_public_url(self, asset_id: int) -> str | None:
        try:
            record = self.get_asset(asset_id)
        except (OSError, ValueError) as e:
            raise AssetStoreError("Could not read the media index.") from e
        if record is None:
            return None
        return f"{self.public_url}/media/{quote(record['file'])}"

    def resolve_file(self, rel_path: str) -> Path | None:
        f = (self.root / rel_path).resolve()
        if not f.is_relative_to(self.root) or not f.is_file():
            return None
        return f
