"""Export job store — persistence and state transitions for ExportJob rows.

Every mutation is a single ``UPDATE ... WHERE id = :id`` guarded by the
expected current status, so concurrent writers (a worker checkpointing and
an operator deleting) never need cross-row locking. Mutators return
``False`` when no row matched, which callers treat as "the job is gone or
no longer in the expected state".
"""

import uuid
from typing import Any, NamedTuple

from loguru import logger
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from constituency_api.lib.exporter.base import ArtifactMetadata
from constituency_api.models.base import utcnow
from constituency_api.models.export_job import ExportJob, ExportJobStatus

MAX_ERROR_MESSAGE_LENGTH = 500


async def _apply(session: AsyncSession, job_id: uuid.UUID, *conditions: Any, **values: Any) -> bool:
    """Run a guarded single-row update and commit it."""
    stmt = (
        update(ExportJob)
        .where(ExportJob.id == job_id, *conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount > 0


async def insert_job(
    session: AsyncSession,
    *,
    export_type: str,
    output_format: str,
    filters: dict,
    selected_columns: list[str],
) -> ExportJob:
    """Persist a new job in the ``pending`` state."""
    job = ExportJob(
        type=export_type,
        format=output_format,
        status=ExportJobStatus.PENDING,
        progress_percent=0,
        filters=filters,
        selected_columns=selected_columns,
    )
    session.add(job)
    await session.commit()
    await session.refresh(job)
    return job


async def fetch_job(session: AsyncSession, job_id: uuid.UUID) -> ExportJob | None:
    """Get an export job by ID."""
    result = await session.execute(select(ExportJob).where(ExportJob.id == job_id))
    return result.scalar_one_or_none()


async def fetch_recent_jobs(session: AsyncSession, *, limit: int) -> list[ExportJob]:
    """Return up to ``limit`` jobs, most recent first."""
    query = select(ExportJob).order_by(ExportJob.created_at.desc(), ExportJob.id).limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def fetch_pending_job_ids(session: AsyncSession) -> list[uuid.UUID]:
    """Return IDs of pending jobs in creation (admission) order."""
    query = (
        select(ExportJob.id)
        .where(ExportJob.status == ExportJobStatus.PENDING)
        .order_by(ExportJob.created_at.asc(), ExportJob.id)
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def mark_processing(session: AsyncSession, job_id: uuid.UUID) -> bool:
    """Transition ``pending -> processing``."""
    return await _apply(
        session,
        job_id,
        ExportJob.status == ExportJobStatus.PENDING,
        status=ExportJobStatus.PROCESSING,
        progress_percent=0,
        processed_records=0,
        started_at=utcnow(),
    )


async def set_total_records(session: AsyncSession, job_id: uuid.UUID, total_records: int) -> bool:
    """Persist the pre-scan record count of a processing job."""
    return await _apply(
        session,
        job_id,
        ExportJob.status == ExportJobStatus.PROCESSING,
        total_records=total_records,
    )


async def record_progress(
    session: AsyncSession,
    job_id: uuid.UUID,
    *,
    processed_records: int,
    total_records: int,
    progress_percent: int,
) -> bool:
    """Checkpoint progress of a processing job.

    Each field only ever moves forward: a stale or repeated checkpoint
    leaves larger stored values untouched.
    """
    return await _apply(
        session,
        job_id,
        ExportJob.status == ExportJobStatus.PROCESSING,
        processed_records=case(
            (func.coalesce(ExportJob.processed_records, 0) < processed_records, processed_records),
            else_=ExportJob.processed_records,
        ),
        total_records=case(
            (func.coalesce(ExportJob.total_records, 0) < total_records, total_records),
            else_=ExportJob.total_records,
        ),
        progress_percent=case(
            (ExportJob.progress_percent < progress_percent, progress_percent),
            else_=ExportJob.progress_percent,
        ),
    )


async def mark_completed(
    session: AsyncSession,
    job_id: uuid.UUID,
    *,
    artifact: ArtifactMetadata,
    total_records: int,
) -> bool:
    """Transition ``processing -> completed`` and attach the artifact."""
    return await _apply(
        session,
        job_id,
        ExportJob.status == ExportJobStatus.PROCESSING,
        status=ExportJobStatus.COMPLETED,
        progress_percent=100,
        processed_records=artifact.record_count,
        total_records=max(total_records, artifact.record_count),
        artifact_location=artifact.location,
        artifact_name=artifact.name,
        artifact_size_kb=artifact.size_kb,
        error_message=None,
        completed_at=utcnow(),
    )


async def mark_failed(session: AsyncSession, job_id: uuid.UUID, message: str) -> bool:
    """Transition a non-terminal job to ``failed`` with a bounded message."""
    return await _apply(
        session,
        job_id,
        ExportJob.status.in_([ExportJobStatus.PENDING, ExportJobStatus.PROCESSING]),
        status=ExportJobStatus.FAILED,
        error_message=message[:MAX_ERROR_MESSAGE_LENGTH],
        artifact_location=None,
        artifact_name=None,
        artifact_size_kb=None,
        completed_at=utcnow(),
    )


class RemovedJob(NamedTuple):
    """State of a job captured by the statement that deleted it."""

    status: str
    artifact_location: str | None


async def remove_job(session: AsyncSession, job_id: uuid.UUID) -> RemovedJob | None:
    """Delete a job row.

    The artifact reference is read by the DELETE itself, so a worker that
    completes concurrently cannot leave an unreferenced file behind.

    Returns:
        The deleted job's status and artifact reference, or None if it did not exist.
    """
    stmt = (
        delete(ExportJob)
        .where(ExportJob.id == job_id)
        .returning(ExportJob.status, ExportJob.artifact_location)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    row = result.one_or_none()
    await session.commit()
    if row is None:
        return None
    return RemovedJob(status=row.status, artifact_location=row.artifact_location)


async def fail_interrupted_jobs(session: AsyncSession) -> int:
    """Fail jobs left ``processing`` by a previous process.

    Returns:
        Number of jobs marked failed.
    """
    stmt = (
        update(ExportJob)
        .where(ExportJob.status == ExportJobStatus.PROCESSING)
        .values(
            status=ExportJobStatus.FAILED,
            error_message="Export was interrupted by a service restart. Please submit it again.",
            completed_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    await session.commit()
    if result.rowcount:
        logger.warning(f"Marked {result.rowcount} interrupted export job(s) as failed")
    return result.rowcount
