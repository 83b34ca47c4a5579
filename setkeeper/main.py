import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from setkeeper.api import checklist_router, health_router, search_router, sets_router
from setkeeper.config import settings
from setkeeper.db.database import init_db
from setkeeper.models.failure import KnownError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("setkeeper"),
    lifespan=lifespan,
)

app.include_router(checklist_router)
app.include_router(health_router)
app.include_router(search_router)
app.include_router(sets_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Classified failures become JSON error bodies with their own status code."""
    logger.info(
        "known_error",
        extra={"kind": exc.kind.value, "status_code": exc.status_code, "error_message": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})
