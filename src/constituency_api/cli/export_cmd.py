"""Export CLI commands for bulk voter data export."""

import asyncio
import uuid
from pathlib import Path

import typer

export_app = typer.Typer()


@export_app.command("run")
def export_run(
    output_format: str = typer.Option("csv", "--format", help="Output format (csv, excel, pdf)"),
    area_codes: list[str] | None = typer.Option(None, "--part", help="Polling part number (repeatable)"),
    ward_codes: list[str] | None = typer.Option(None, "--ward", help="Ward number (repeatable)"),
    ac_codes: list[str] | None = typer.Option(None, "--ac", help="Assembly constituency number (repeatable)"),
    gender: str | None = typer.Option(None, "--gender", help="Filter by gender (M, F, O)"),
    min_age: int | None = typer.Option(None, "--min-age", help="Minimum age"),
    max_age: int | None = typer.Option(None, "--max-age", help="Maximum age"),
    has_phone: bool | None = typer.Option(None, "--has-phone/--no-phone", help="Filter by mobile number presence"),
    religion: str | None = typer.Option(None, "--religion", help="Filter by religion"),
    voted: bool | None = typer.Option(None, "--voted/--not-voted", help="Filter by voted flag"),
    columns: list[str] | None = typer.Option(None, "--column", help="Column key to include (repeatable)"),
    output: Path | None = typer.Option(None, "--output", help="Output directory"),
) -> None:
    """Export voter data to file, in the foreground."""
    filters = {
        "area_codes": area_codes or None,
        "ward_codes": ward_codes or None,
        "ac_codes": ac_codes or None,
        "gender": gender,
        "min_age": min_age,
        "max_age": max_age,
        "has_phone": has_phone,
        "religion": religion,
        "voted_flag": voted,
    }
    filters = {key: value for key, value in filters.items() if value is not None}
    asyncio.run(_export_run(output_format, filters, columns or [], output))


async def _export_run(
    output_format: str,
    filters: dict,
    columns: list[str],
    output_dir: Path | None,
) -> None:
    """Async implementation of export."""
    from dataclasses import replace

    from constituency_api.core.config import get_settings
    from constituency_api.core.database import dispose_engine, get_session_factory, init_engine
    from constituency_api.lib.exporter import ExportValidationError, LocalArtifactStore
    from constituency_api.services.export_service import create_export_job, get_export_job
    from constituency_api.services.export_worker import WorkerOptions, run_export_job

    settings = get_settings()
    init_engine(settings.database_url)

    options = WorkerOptions.from_settings(settings)
    if output_dir is not None:
        options = replace(options, export_dir=output_dir)

    try:
        factory = get_session_factory()
        async with factory() as session:
            try:
                job = await create_export_job(
                    session,
                    export_type="voters",
                    output_format=output_format,
                    filters=filters,
                    selected_columns=columns,
                )
            except ExportValidationError as e:
                typer.echo(f"Invalid export request: {e}", err=True)
                raise typer.Exit(code=1) from e

        typer.echo(f"Export job created: {job.id}")
        typer.echo(f"Format: {output_format}")
        typer.echo("Processing...")

        await run_export_job(job.id, session_factory=factory, options=options)

        async with factory() as session:
            job = await get_export_job(session, job.id)

        typer.echo(f"\nExport {job.status}:")
        typer.echo(f"  Records:    {job.processed_records or 0}")
        if job.error_message:
            typer.echo(f"  Error:      {job.error_message}")
            raise typer.Exit(code=1)
        typer.echo(f"  File size:  {job.artifact_size_kb or 0} KB")
        if job.artifact_location:
            typer.echo(f"  File path:  {LocalArtifactStore(options.export_dir).resolve(job.artifact_location)}")
    finally:
        await dispose_engine()


@export_app.command("list")
def export_list(
    limit: int = typer.Option(10, "--limit", help="Number of jobs to show (max 100)"),
) -> None:
    """List recent export jobs."""
    asyncio.run(_export_list(limit))


async def _export_list(limit: int) -> None:
    from constituency_api.core.config import get_settings
    from constituency_api.core.database import dispose_engine, get_session_factory, init_engine
    from constituency_api.services.export_service import list_export_jobs

    settings = get_settings()
    init_engine(settings.database_url)
    try:
        async with get_session_factory()() as session:
            jobs = await list_export_jobs(session, limit=limit)
    finally:
        await dispose_engine()

    if not jobs:
        typer.echo("No export jobs found.")
        return
    for job in jobs:
        progress = f"{job.progress_percent:>3}%"
        records = f"{job.processed_records or 0}/{job.total_records if job.total_records is not None else '?'}"
        created = f"{job.created_at:%Y-%m-%d %H:%M}"
        typer.echo(f"{job.id}  {job.format:<5}  {job.status:<10}  {progress}  {records:>13}  {created}")


@export_app.command("delete")
def export_delete(
    job_id: uuid.UUID = typer.Argument(..., help="Export job ID"),
) -> None:
    """Delete an export job and its file."""
    asyncio.run(_export_delete(job_id))


async def _export_delete(job_id: uuid.UUID) -> None:
    from constituency_api.core.config import get_settings
    from constituency_api.core.database import dispose_engine, get_session_factory, init_engine
    from constituency_api.lib.exporter import ExportJobNotFoundError, LocalArtifactStore
    from constituency_api.services.export_service import delete_export_job

    settings = get_settings()
    init_engine(settings.database_url)
    try:
        async with get_session_factory()() as session:
            await delete_export_job(session, job_id, artifact_store=LocalArtifactStore(settings.export_dir))
    except ExportJobNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()
    typer.echo(f"Deleted export job {job_id}")
