"""Export API endpoints for bulk voter data export."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from constituency_api.core.background import ExportScheduler, get_scheduler
from constituency_api.core.config import Settings, get_settings
from constituency_api.core.dependencies import get_async_session
from constituency_api.lib.exporter import (
    COLUMN_REGISTRY_VERSION,
    EXPORT_COLUMNS,
    ExportJobNotFoundError,
    ExportValidationError,
    LocalArtifactStore,
    media_type_for,
)
from constituency_api.models.export_job import ExportJob, ExportJobStatus
from constituency_api.schemas.export import (
    ColumnRegistryResponse,
    ExportColumnResponse,
    ExportJobResponse,
    ExportRequest,
)
from constituency_api.services.export_service import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    create_export_job,
    delete_export_job,
    get_export_job,
    list_export_jobs,
)

exports_router = APIRouter(prefix="/exports", tags=["exports"])


def _build_download_url(job_id: uuid.UUID, settings: Settings) -> str:
    """Build the download URL for a completed export."""
    return f"{settings.api_v1_prefix}/exports/{job_id}/download"


def _job_to_response(job: ExportJob, settings: Settings) -> ExportJobResponse:
    """Convert an ExportJob to response with download URL."""
    response = ExportJobResponse.model_validate(job)
    if response.status == ExportJobStatus.COMPLETED:
        response.download_url = _build_download_url(response.id, settings)
    return response


@exports_router.post(
    "",
    response_model=ExportJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_export(
    request: ExportRequest,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    scheduler: ExportScheduler = Depends(get_scheduler),
) -> ExportJobResponse:
    """Request a bulk voter export. The job runs in the background."""
    try:
        job = await create_export_job(
            session,
            export_type=request.type,
            output_format=request.format,
            filters=request.filters.predicates(),
            selected_columns=request.filters.selected_columns,
        )
    except ExportValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    scheduler.submit(job.id)
    return _job_to_response(job, settings)


@exports_router.get(
    "",
    response_model=list[ExportJobResponse],
)
async def list_exports(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[ExportJobResponse]:
    """List recent export jobs, newest first."""
    jobs = await list_export_jobs(session, limit=limit)
    return [_job_to_response(j, settings) for j in jobs]


@exports_router.get(
    "/columns",
    response_model=ColumnRegistryResponse,
)
async def list_export_columns() -> ColumnRegistryResponse:
    """List the columns that can be selected for export."""
    return ColumnRegistryResponse(
        version=COLUMN_REGISTRY_VERSION,
        columns=[ExportColumnResponse.model_validate(column) for column in EXPORT_COLUMNS],
    )


@exports_router.get(
    "/{job_id}",
    response_model=ExportJobResponse,
)
async def get_export_status(
    job_id: uuid.UUID,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> ExportJobResponse:
    """Get export job status."""
    try:
        job = await get_export_job(session, job_id)
    except ExportJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Export job not found") from e
    return _job_to_response(job, settings)


@exports_router.get(
    "/{job_id}/download",
)
async def download_export(
    job_id: uuid.UUID,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> FileResponse:
    """Download a completed export file."""
    try:
        job = await get_export_job(session, job_id)
    except ExportJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Export job not found") from e

    if job.status != ExportJobStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Export not yet completed",
        )

    if not job.artifact_location:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Export file not found",
        )

    try:
        file_path = LocalArtifactStore(settings.export_dir).resolve(job.artifact_location)
    except FileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Export file not found") from e
    if not file_path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Export file not found on disk",
        )

    return FileResponse(
        path=file_path,
        media_type=media_type_for(job.format),
        filename=job.artifact_name or file_path.name,
    )


@exports_router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_export(
    job_id: uuid.UUID,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    scheduler: ExportScheduler = Depends(get_scheduler),
) -> Response:
    """Delete an export job and its file. A running job is stopped."""
    try:
        await delete_export_job(
            session,
            job_id,
            artifact_store=LocalArtifactStore(settings.export_dir),
            scheduler=scheduler,
        )
    except ExportJobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Export job not found") from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
