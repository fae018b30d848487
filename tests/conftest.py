import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


TEST_ADMIN_KEY = "test-admin-key"
TEST_PUBLIC_URL = "https://media.example.test"


@pytest.fixture()
def app_ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict:
    data_dir = tmp_path / "data"
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("DRIVE_SYNC_ADMIN_KEY", TEST_ADMIN_KEY)
    monkeypatch.setenv("DRIVE_SYNC_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DRIVE_SYNC_TEMP_DIR", str(temp_dir))
    monkeypatch.setenv("DRIVE_SYNC_PUBLIC_URL", TEST_PUBLIC_URL)

    for name in list(sys.modules.keys()):
        if name == "drive_sync" or name.startswith("drive_sync."):
            del sys.modules[name]

    import importlib

    main = importlib.import_module("drive_sync.main")
    return {
        "app": main.app,
        "data_dir": data_dir,
        "temp_dir": temp_dir,
        "media_dir": data_dir / "media",
        "admin_key": TEST_ADMIN_KEY,
    }


@pytest.fixture()
def client(app_ctx: dict):
    with TestClient(app_ctx["app"]) as c:
        yield c


@pytest.fixture()
def sync_token(client, app_ctx: dict) -> str:
    from drive_sync.tokens import FileTokenStore

    token = FileTokenStore(app_ctx["data_dir"] / "_sync_token.json").get()
    assert token
    return token


@pytest.fixture()
def temp_dir(app_ctx: dict) -> Path:
    return app_ctx["temp_dir"]


@pytest.fixture()
def media_dir(app_ctx: dict) -> Path:
    return app_ctx["media_dir"]


@pytest.fixture()
def admin_key(app_ctx: dict) -> str:
    return app_ctx["admin_key"]
