from __future__ import annotations

import logging
import sys
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import create_router
from config import Settings, get_settings
from models import now_instant
from repository import InMemoryRoomRepository
from services import ReservationService


API_BASE = "/api/v1"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_app(
    settings: Optional[Settings] = None,
    repo: Optional[InMemoryRoomRepository] = None,
    clock: Callable[[], int] = now_instant,
) -> FastAPI:
    settings = settings or get_settings()
    repo = repo or InMemoryRoomRepository(settings.room_count)
    service = ReservationService(repo, settings=settings, clock=clock)

    app = FastAPI(title=settings.app_name, version="1.0.0")
    app.state.repo = repo
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Reported as 500 when the handler raises
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s %d %.1fms",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
            )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error."},
        )

    @app.get("/")
    def root() -> dict:
        return {"service": "room-reservations", "version": "v1", "api_base": API_BASE}

    app.include_router(create_router(service), prefix=API_BASE)

    # Registered last so it only sees paths no other route matched
    @app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def api_not_found(path: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "API endpoint not found."},
        )

    return app


# Wire up dependencies (in-memory store, lost on restart)
_settings = get_settings()
configure_logging(_settings.log_level)
_repo = InMemoryRoomRepository(_settings.room_count)
app = create_app(_settings, repo=_repo)
_service: ReservationService = app.state.service


def reset_data() -> None:
    """Restore the initial empty rooms. For testing and development."""
    _service.reset()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=_settings.host,
        port=_settings.port,
        reload=False,
        log_level=_settings.log_level.lower(),
    )
