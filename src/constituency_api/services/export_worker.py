"""Export worker — runs a single export job from ``pending`` to a terminal state.

The worker reads voters through one long-lived streaming session and
writes job state through short-lived sessions, one per checkpoint. It owns
the job for the whole run; the only outside influence is deletion, which
the worker notices at checkpoints and answers by discarding its output.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from constituency_api.core.config import Settings
from constituency_api.lib.exporter import (
    ExportExecutionError,
    ExportSerializer,
    ExportValidationError,
    ExportWriter,
    LocalArtifactStore,
    RecordSourceError,
    checkpoint_interval,
    create_serializer,
    progress_percent,
)
from constituency_api.models.export_job import ExportJob, ExportJobStatus
from constituency_api.services import export_job_store as store
from constituency_api.services.export_query import QueryPlan, compile_export_plan

GENERIC_FAILURE_MESSAGE = "Export failed due to an internal error. Please try again."
SOURCE_FAILURE_MESSAGE = "Voter records could not be read. Please try again later."


@dataclass(frozen=True)
class WorkerOptions:
    """Tuning knobs for export execution."""

    export_dir: Path
    stream_batch_size: int = 1000
    checkpoint_rows: int = 500
    checkpoint_percent: int = 2
    checkpoint_timeout: float = 5.0
    checkpoint_retries: int = 3
    checkpoint_backoff: float = 0.5
    report_max_rows: int = 5000

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkerOptions":
        return cls(
            export_dir=Path(settings.export_dir),
            stream_batch_size=settings.export_stream_batch_size,
            checkpoint_rows=settings.export_checkpoint_rows,
            checkpoint_percent=settings.export_checkpoint_percent,
            checkpoint_timeout=settings.export_checkpoint_timeout,
            checkpoint_retries=settings.export_checkpoint_retries,
            checkpoint_backoff=settings.export_checkpoint_backoff,
            report_max_rows=settings.export_report_max_rows,
        )


class ExportCancelledError(Exception):
    """The job was deleted while the worker was running it."""


def _never_cancelled(_job_id: uuid.UUID) -> bool:
    return False


def user_safe_message(exc: BaseException) -> str:
    """Map an exception to the message stored on a failed job."""
    if isinstance(exc, ExportExecutionError):
        return exc.message
    if isinstance(exc, ExportValidationError):
        return str(exc)
    if isinstance(exc, SQLAlchemyError):
        return SOURCE_FAILURE_MESSAGE
    return GENERIC_FAILURE_MESSAGE


def artifact_basename(job: ExportJob) -> str:
    """File name stem for a job's artifact, e.g. ``voters_export_2026-10-19_14-05_1a2b3c4d``."""
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d_%H-%M")
    return f"{job.type}_export_{timestamp}_{job.id.hex[:8]}"


async def write_job_state(
    session_factory: async_sessionmaker[AsyncSession],
    options: WorkerOptions,
    job_id: uuid.UUID,
    write: Callable[[AsyncSession], Awaitable[bool]],
    *,
    what: str,
) -> bool | None:
    """Apply a job-store write with a per-attempt timeout and exponential backoff.

    Returns:
        The store's result (False when the job row no longer matches), or
        None when every attempt failed.
    """

    async def _attempt() -> bool:
        async with session_factory() as session:
            return await write(session)

    delay = options.checkpoint_backoff
    for attempt in range(1, options.checkpoint_retries + 1):
        try:
            return await asyncio.wait_for(_attempt(), timeout=options.checkpoint_timeout)
        except (TimeoutError, SQLAlchemyError) as e:
            logger.warning(
                f"Export job {job_id}: {what} attempt {attempt}/{options.checkpoint_retries} failed: {e!r}"
            )
            if attempt < options.checkpoint_retries:
                await asyncio.sleep(delay)
                delay *= 2
    return None


async def _count_records(plan: QueryPlan, session: AsyncSession) -> int:
    try:
        return await plan.count(session)
    except SQLAlchemyError as e:
        raise RecordSourceError(SOURCE_FAILURE_MESSAGE) from e


async def run_export_job(
    job_id: uuid.UUID,
    *,
    session_factory: async_sessionmaker[AsyncSession],
    options: WorkerOptions,
    is_cancelled: Callable[[uuid.UUID], bool] = _never_cancelled,
) -> ExportJobStatus | None:
    """Process one export job end to end.

    Execution failures never propagate: they end the job as ``failed``.

    Args:
        job_id: The job to run.
        session_factory: Factory for database sessions.
        options: Worker tuning options.
        is_cancelled: Returns True once the job has been deleted.

    Returns:
        The terminal status written, or None if the job was skipped
        (no longer pending) or cancelled.
    """
    async with session_factory() as session:
        if not await store.mark_processing(session, job_id):
            logger.info(f"Export job {job_id} is no longer pending, skipping")
            return None
        job = await store.fetch_job(session, job_id)
    if job is None:
        return None

    logger.info(f"Export job {job_id} started (format={job.format})")
    artifact_store = LocalArtifactStore(options.export_dir)
    serializer: ExportSerializer | None = None
    writer: ExportWriter | None = None
    published: str | None = None

    try:
        plan = compile_export_plan(job.filters, job.selected_columns)

        async with session_factory() as read_session:
            total = await _count_records(plan, read_session)
            applied = await write_job_state(
                session_factory,
                options,
                job_id,
                lambda s: store.set_total_records(s, job_id, total),
                what="total count",
            )
            if applied is False or is_cancelled(job_id):
                raise ExportCancelledError
            logger.debug(f"Export job {job_id}: {total} matching records")

            serializer = create_serializer(
                job.format,
                artifact_store,
                report_max_rows=options.report_max_rows,
                filter_description=plan.filters.describe(),
            )
            writer = serializer.begin(plan.columns, artifact_basename(job), expected_rows=total)

            interval = checkpoint_interval(
                total,
                every_rows=options.checkpoint_rows,
                every_percent=options.checkpoint_percent,
            )
            next_checkpoint = interval
            try:
                async with aclosing(plan.stream(read_session, batch_size=options.stream_batch_size)) as rows:
                    async for row in rows:
                        serializer.write_row(writer, row)
                        if writer.row_count >= next_checkpoint:
                            next_checkpoint += interval
                            await _checkpoint(session_factory, options, job_id, writer.row_count, total, is_cancelled)
            except SQLAlchemyError as e:
                raise RecordSourceError(SOURCE_FAILURE_MESSAGE) from e

        if is_cancelled(job_id):
            raise ExportCancelledError

        artifact = serializer.end(writer)
        writer = None
        published = artifact.location

        completed = await write_job_state(
            session_factory,
            options,
            job_id,
            lambda s: store.mark_completed(s, job_id, artifact=artifact, total_records=total),
            what="completion",
        )
        if completed is False:
            raise ExportCancelledError
        if completed is None:
            msg = "The export finished but its result could not be saved. Please try again."
            raise ExportExecutionError(msg)

    except ExportCancelledError:
        _discard_output(artifact_store, serializer, writer, published)
        logger.info(f"Export job {job_id} was deleted during processing; output discarded")
        return None

    except Exception as e:
        _discard_output(artifact_store, serializer, writer, published)
        if isinstance(e, ExportExecutionError | ExportValidationError):
            logger.warning(f"Export job {job_id} failed: {e}")
        else:
            logger.exception(f"Export job {job_id} failed")
        failed = await write_job_state(
            session_factory,
            options,
            job_id,
            lambda s: store.mark_failed(s, job_id, user_safe_message(e)),
            what="failure status",
        )
        if failed is None:
            logger.error(f"Export job {job_id}: could not record failure status")
        return ExportJobStatus.FAILED

    logger.info(f"Export job {job_id} completed: {artifact.record_count} records, {artifact.size_bytes} bytes")
    return ExportJobStatus.COMPLETED


async def _checkpoint(
    session_factory: async_sessionmaker[AsyncSession],
    options: WorkerOptions,
    job_id: uuid.UUID,
    processed: int,
    total: int,
    is_cancelled: Callable[[uuid.UUID], bool],
) -> None:
    """Persist progress, or raise ExportCancelledError if the job was deleted."""
    if is_cancelled(job_id):
        raise ExportCancelledError
    known_total = max(total, processed)
    percent = progress_percent(processed, known_total)
    applied = await write_job_state(
        session_factory,
        options,
        job_id,
        lambda s: store.record_progress(
            s,
            job_id,
            processed_records=processed,
            total_records=known_total,
            progress_percent=percent,
        ),
        what="checkpoint",
    )
    if applied is False:
        raise ExportCancelledError
    logger.debug(f"Export job {job_id}: {processed}/{known_total} ({percent}%)")


def _discard_output(
    artifact_store: LocalArtifactStore,
    serializer: ExportSerializer | None,
    writer: ExportWriter | None,
    published: str | None,
) -> None:
    if serializer is not None and writer is not None:
        serializer.abort(writer)
    if published is not None:
        artifact_store.delete(published)
