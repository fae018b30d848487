import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from drive_sync.config import LOG_LEVEL
from drive_sync.deps import get_token_store
from drive_sync.responses import register_error_handlers
from drive_sync.routes import health, media, settings, upload
from drive_sync.tokens import ensure_token

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_token(app.dependency_overrides.get(get_token_store, get_token_store)())
    yield


app = FastAPI(title="drive-sync", docs_url=None, redoc_url=None, openapi_url=None, lifespan=lifespan)
register_error_handlers(app)


@app.middleware("http")
async def referrer_policy_middleware(request, call_next):
    response = await call_next(request)
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


app.include_router(health.router)
app.include_router(media.router)
app.include_router(upload.router)
app.include_router(settings.router)
