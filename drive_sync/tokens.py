from __future__ import annotations

import json
import logging
import os
import secrets
import string
import tempfile
from pathlib import Path
from threading import Lock
from typing import Protocol

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 40
_ALPHABET = string.ascii_letters + string.digits


class TokenProvider(Protocol):
    def get(self) -> str | None: ...

    def set(self, value: str) -> None: ...


class FileTokenStore:
    """Sync token persisted as ``{"token": ...}`` in a single JSON file.

    Writes go through a temp file and ``os.replace`` so readers never observe
    a half-written value.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()

    def get(self) -> str | None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("token file unreadable: %s", self.path)
            return None
        if not isinstance(data, dict):
            return None
        value = data.get("token")
        return value if isinstance(value, str) and value else None

    def set(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            fd, tmp = tempfile.mkstemp(prefix=".token-", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump({"token": value}, f)
                os.chmod(tmp, 0o600)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise


def generate_token(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def ensure_token(store: TokenProvider) -> str:
    """Create the sync token on first start; an existing one is kept."""
    current = store.get()
    if current:
        return current
    value = generate_token()
    store.set(value)
    logger.info("sync token created")
    return value


def regenerate_token(store: TokenProvider) -> str:
    value = generate_token()
    store.set(value)
    logger.info("sync token regenerated")
    return value
