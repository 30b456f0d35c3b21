"""ExportJob model — tracks a bulk voter data export."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from constituency_api.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class ExportJobStatus(enum.StrEnum):
    """Lifecycle states of an export job.

    ``pending -> processing -> completed | failed``; terminal states only
    end by deletion.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExportJobStatus.COMPLETED, ExportJobStatus.FAILED)


class ExportFormat(enum.StrEnum):
    """Output formats: delimited text, spreadsheet-compatible text, printable report."""

    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"


class ExportType(enum.StrEnum):
    """Dataset kinds that can be exported."""

    VOTERS = "voters"


class ExportJob(Base, UUIDMixin, TimestampMixin):
    """Tracks a bulk data export operation.

    Filters and selected columns are fixed at creation. Progress, counts,
    artifact fields and the error message are written only by the worker
    that owns the job.
    """

    __tablename__ = "export_jobs"

    type: Mapped[str] = mapped_column(String(50), nullable=False, default=ExportType.VOTERS)
    format: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ExportJobStatus.PENDING,
        server_default=ExportJobStatus.PENDING.value,
    )
    progress_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_records: Mapped[int | None] = mapped_column(Integer, nullable=True)
    processed_records: Mapped[int | None] = mapped_column(Integer, nullable=True)

    filters: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    selected_columns: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    # Set on completion only
    artifact_location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    artifact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    artifact_size_kb: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Set on failure only
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_export_jobs_status", "status"),
        Index("ix_export_jobs_created_at", "created_at"),
    )
