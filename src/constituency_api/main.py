"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from constituency_api.core.background import get_scheduler, init_scheduler, shutdown_scheduler
from constituency_api.core.config import get_settings
from constituency_api.core.database import dispose_engine, get_session_factory, init_engine
from constituency_api.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle.

    Startup initializes the engine and the export scheduler, then fails
    interrupted jobs and re-queues pending ones. Shutdown stops the
    workers before the engine is disposed.
    """
    from constituency_api.services.export_service import recover_export_jobs
    from constituency_api.services.export_worker import WorkerOptions, run_export_job

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_engine(settings.database_url, echo=False)
    session_factory = get_session_factory()

    options = WorkerOptions.from_settings(settings)

    async def run_job(job_id: uuid.UUID) -> None:
        await run_export_job(
            job_id,
            session_factory=session_factory,
            options=options,
            is_cancelled=get_scheduler().is_cancelled,
        )

    scheduler = init_scheduler(run_job, settings.export_max_workers)
    await recover_export_jobs(session_factory, scheduler)

    yield

    await shutdown_scheduler()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Constituency API",
        description="Constituency services back-office: asynchronous bulk voter data exports",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register exception handlers
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    # Register middleware and routers
    from constituency_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
