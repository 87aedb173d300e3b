"""
levelup.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn levelup.api.main:app --reload --port 3001
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from levelup import __version__  # noqa: E402
from levelup.api.auth import router as auth_router  # noqa: E402
from levelup.api.deps import get_engine  # noqa: E402
from levelup.api.errors import setup_error_handlers  # noqa: E402
from levelup.api.routes.achievements import router as achievements_router  # noqa: E402
from levelup.api.routes.profile import router as profile_router  # noqa: E402
from levelup.api.routes.rewards import router as rewards_router  # noqa: E402
from levelup.api.routes.tasks import router as tasks_router  # noqa: E402
from levelup.api.webhooks import router as webhooks_router  # noqa: E402
from levelup.database.engine import init_db  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the DB engine on startup and dispose it on exit."""
    level = os.getenv("LOG_LEVEL", "").strip().upper()
    if level:
        logging.getLogger("levelup").setLevel(level)

    engine = get_engine()
    init_db(engine)
    logger.info("LevelUp API started, engine ready (%s)", engine.url.database)
    yield
    engine.dispose()
    logger.info("LevelUp API shutting down")


app = FastAPI(
    title="LevelUp API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handlers(app)

# Mount routers
app.include_router(auth_router)
app.include_router(webhooks_router)
app.include_router(profile_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(achievements_router, prefix="/api")
app.include_router(rewards_router, prefix="/api")


@app.get("/")
def root():
    return {"name": "LevelUp API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}
