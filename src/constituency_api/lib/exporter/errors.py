"""Exception taxonomy for the export pipeline.

Validation and not-found errors are reported to the caller directly.
Execution errors are absorbed into the job record; their message is shown
to the operator, so it must never carry internal detail.
"""


class ExportValidationError(ValueError):
    """Raised when filters, columns, format or type of a request are malformed."""


class ExportJobNotFoundError(LookupError):
    """Raised when an operation targets an export job that does not exist."""

    def __init__(self, job_id: object) -> None:
        self.job_id = job_id
        super().__init__(f"Export job {job_id} not found")


class ExportExecutionError(Exception):
    """Base class for failures while an export job is running.

    Args:
        message: Operator-facing description stored on the failed job.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ReportTooLargeError(ExportExecutionError):
    """Raised when a printable report would exceed its row ceiling."""

    def __init__(self, row_count: int, max_rows: int) -> None:
        self.row_count = row_count
        self.max_rows = max_rows
        super().__init__(
            f"Printable report is limited to {max_rows:,} rows but the export matched "
            f"{row_count:,}. Narrow the filters or choose the CSV or Excel format."
        )


class ArtifactWriteError(ExportExecutionError):
    """Raised when the export file cannot be written or published."""


class RecordSourceError(ExportExecutionError):
    """Raised when voter records cannot be read from the database."""
