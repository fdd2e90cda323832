import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from server_monitor.api import router
from server_monitor.core import (
    BackendUnavailableError,
    DuplicateDateError,
    DuplicateRecordIdError,
    RecordNotFoundError,
    Settings,
    settings,
)
from server_monitor.services import generate_sample_records
from server_monitor.storage import RecordRepository, build_repository
from server_monitor.utils.logger import setup_logging

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    DuplicateDateError: 409,
    DuplicateRecordIdError: 409,
    RecordNotFoundError: 404,
    BackendUnavailableError: 503,
}


def seed_sample_data(repository: RecordRepository) -> int:
    if repository.count():
        return 0
    inserted = repository.bulk_insert(generate_sample_records())
    logger.info("Seeded %d sample records", len(inserted))
    return len(inserted)


def create_app(repository: RecordRepository | None = None, config: Settings = settings) -> FastAPI:
    setup_logging(config)

    app = FastAPI(
        title="Server Room Monitor API",
        version="0.1.0",
        description="Environmental log entry, monthly aggregation and reporting for server rooms.",
    )
    app.state.repository = repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    for error_type, status_code in ERROR_STATUS.items():
        app.add_exception_handler(error_type, _error_handler(status_code))

    @app.on_event("startup")
    def on_startup() -> None:
        if app.state.repository is None:
            app.state.repository = build_repository(config)
            app.state.repository.open()
        if config.seed_sample_data:
            seed_sample_data(app.state.repository)

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        if app.state.repository is not None:
            app.state.repository.close()

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Server room monitor backend is running", "docs": "/docs"}

    return app


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


app = create_app()


if __name__ == "__main__":
    uvicorn.run("server_monitor.main:app", host=settings.host, port=settings.port, reload=settings.debug)
