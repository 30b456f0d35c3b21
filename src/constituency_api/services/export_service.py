"""Export service — create, inspect, delete and recover export jobs.

Request validation happens here, synchronously, so a malformed request is
rejected before a job row exists. Execution is left to the scheduler.
"""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constituency_api.core.background import ExportScheduler
from constituency_api.lib.exporter import (
    SUPPORTED_FORMATS,
    ExportJobNotFoundError,
    ExportValidationError,
    LocalArtifactStore,
)
from constituency_api.models.export_job import ExportJob, ExportType
from constituency_api.services import export_job_store as store
from constituency_api.services.export_query import compile_export_plan

DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 100


async def create_export_job(
    session: AsyncSession,
    *,
    export_type: str,
    output_format: str,
    filters: dict[str, Any] | None = None,
    selected_columns: list[str] | None = None,
) -> ExportJob:
    """Validate a request and persist it as a pending job.

    The caller is responsible for submitting the returned job to a
    scheduler (or running it directly).

    Args:
        session: Database session.
        export_type: Dataset to export (``voters``).
        output_format: One of ``csv``, ``excel``, ``pdf``.
        filters: Filter mapping with snake_case keys.
        selected_columns: Column keys in output order; empty means all.

    Returns:
        The created ExportJob.

    Raises:
        ExportValidationError: If the type, format or filters are invalid.
    """
    if export_type not in {t.value for t in ExportType}:
        msg = f"Unsupported export type: {export_type}"
        raise ExportValidationError(msg)
    if output_format not in SUPPORTED_FORMATS:
        msg = f"Unsupported format: {output_format}. Supported: {SUPPORTED_FORMATS}"
        raise ExportValidationError(msg)

    plan = compile_export_plan(filters, selected_columns)

    job = await store.insert_job(
        session,
        export_type=export_type,
        output_format=output_format,
        filters=plan.filters.to_dict(),
        selected_columns=plan.column_keys,
    )
    logger.info(
        f"Created export job {job.id} (type={export_type}, format={output_format}, "
        f"columns={len(plan.columns)}, filters={plan.filters.describe()})"
    )
    return job


async def list_export_jobs(session: AsyncSession, *, limit: int = DEFAULT_LIST_LIMIT) -> list[ExportJob]:
    """Return the most recent export jobs, newest first.

    Args:
        session: Database session.
        limit: Maximum number of jobs, between 1 and 100.

    Raises:
        ExportValidationError: If ``limit`` is out of range.
    """
    if not 1 <= limit <= MAX_LIST_LIMIT:
        msg = f"limit must be between 1 and {MAX_LIST_LIMIT}, got {limit}"
        raise ExportValidationError(msg)
    return await store.fetch_recent_jobs(session, limit=limit)


async def get_export_job(session: AsyncSession, job_id: uuid.UUID) -> ExportJob:
    """Get an export job by ID.

    Raises:
        ExportJobNotFoundError: If no such job exists.
    """
    job = await store.fetch_job(session, job_id)
    if job is None:
        raise ExportJobNotFoundError(job_id)
    return job


async def delete_export_job(
    session: AsyncSession,
    job_id: uuid.UUID,
    *,
    artifact_store: LocalArtifactStore,
    scheduler: ExportScheduler | None = None,
) -> None:
    """Delete a job in any state together with its artifact.

    A pending job is skipped by the scheduler; a processing job notices
    the deletion at its next checkpoint and discards its partial output.

    Args:
        session: Database session.
        job_id: The job to delete.
        artifact_store: Store holding the job's artifact.
        scheduler: Scheduler to notify, if jobs are running in-process.

    Raises:
        ExportJobNotFoundError: If no such job exists.
    """
    removed = await store.remove_job(session, job_id)
    if removed is None:
        raise ExportJobNotFoundError(job_id)

    if scheduler is not None:
        scheduler.discard(job_id)
    if removed.artifact_location and artifact_store.delete(removed.artifact_location):
        logger.debug(f"Removed artifact {removed.artifact_location}")
    logger.info(f"Deleted export job {job_id} (was {removed.status})")


async def recover_export_jobs(
    session_factory: async_sessionmaker[AsyncSession],
    scheduler: ExportScheduler,
) -> int:
    """Reconcile jobs left behind by a previous process.

    Jobs still ``processing`` lost their worker and are failed; ``pending``
    jobs are queued again in creation order.

    Returns:
        Number of pending jobs re-queued.
    """
    async with session_factory() as session:
        await store.fail_interrupted_jobs(session)
        pending = await store.fetch_pending_job_ids(session)
    for job_id in pending:
        scheduler.submit(job_id)
    if pending:
        logger.info(f"Re-queued {len(pending)} pending export job(s)")
    return len(pending)
