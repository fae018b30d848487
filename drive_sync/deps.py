"""Process-wide collaborators, overridable through ``app.dependency_overrides``."""
from functools import lru_cache
from pathlib import Path

from drive_sync.assets import LocalAssetStore
from drive_sync.config import ALLOWED_MIME, MAX_BYTES, MEDIA_DIR, PUBLIC_URL, TEMP_DIR, TOKEN_FILE
from drive_sync.tokens import FileTokenStore


@lru_cache()
def get_token_store() -> FileTokenStore:
    return FileTokenStore(TOKEN_FILE)


@lru_cache()
def get_asset_store() -> LocalAssetStore:
    return LocalAssetStore(MEDIA_DIR, PUBLIC_URL, ALLOWED_MIME, MAX_BYTES)


def get_temp_dir() -> Path:
    return TEMP_DIR
