"""Exporter library — column registry, filters, serializers and artifact storage.

Database-free building blocks for voter exports. The service layer binds
them to SQLAlchemy queries and the job store.
"""

from constituency_api.lib.exporter.base import ArtifactMetadata, ExportSerializer, ExportWriter
from constituency_api.lib.exporter.columns import (
    COLUMN_REGISTRY_VERSION,
    DEFAULT_COLUMNS,
    EXPORT_COLUMNS,
    ExportColumn,
    resolve_columns,
)
from constituency_api.lib.exporter.csv_writer import DelimitedTextSerializer
from constituency_api.lib.exporter.errors import (
    ArtifactWriteError,
    ExportExecutionError,
    ExportJobNotFoundError,
    ExportValidationError,
    RecordSourceError,
    ReportTooLargeError,
)
from constituency_api.lib.exporter.filters import FilterSpec, parse_filters
from constituency_api.lib.exporter.progress import checkpoint_interval, progress_percent
from constituency_api.lib.exporter.report_writer import DEFAULT_REPORT_MAX_ROWS, PrintableReportSerializer
from constituency_api.lib.exporter.spreadsheet_writer import SpreadsheetTextSerializer
from constituency_api.lib.exporter.storage import LocalArtifactStore

# Format registry mapping format names to serializer classes
_SERIALIZERS: dict[str, type[ExportSerializer]] = {
    "csv": DelimitedTextSerializer,
    "excel": SpreadsheetTextSerializer,
    "pdf": PrintableReportSerializer,
}

SUPPORTED_FORMATS = list(_SERIALIZERS.keys())


def create_serializer(
    output_format: str,
    store: LocalArtifactStore,
    *,
    report_max_rows: int = DEFAULT_REPORT_MAX_ROWS,
    filter_description: str = "All Records",
) -> ExportSerializer:
    """Build the serializer for an output format.

    Args:
        output_format: One of SUPPORTED_FORMATS.
        store: Artifact sink the serializer writes to.
        report_max_rows: Row ceiling for the printable report.
        filter_description: Filter summary shown in the printable report.

    Returns:
        A serializer instance for a single export.

    Raises:
        ExportValidationError: If the format is not supported.
    """
    if output_format not in _SERIALIZERS:
        msg = f"Unsupported format: {output_format}. Supported: {SUPPORTED_FORMATS}"
        raise ExportValidationError(msg)

    if output_format == "pdf":
        return PrintableReportSerializer(store, max_rows=report_max_rows, filter_description=filter_description)
    return _SERIALIZERS[output_format](store)


def media_type_for(output_format: str) -> str:
    """Return the download content type for an output format."""
    serializer = _SERIALIZERS.get(output_format)
    return serializer.media_type if serializer else "application/octet-stream"


__all__ = [
    "COLUMN_REGISTRY_VERSION",
    "DEFAULT_COLUMNS",
    "EXPORT_COLUMNS",
    "SUPPORTED_FORMATS",
    "ArtifactMetadata",
    "ArtifactWriteError",
    "DelimitedTextSerializer",
    "ExportColumn",
    "ExportExecutionError",
    "ExportJobNotFoundError",
    "ExportSerializer",
    "ExportValidationError",
    "ExportWriter",
    "FilterSpec",
    "LocalArtifactStore",
    "PrintableReportSerializer",
    "RecordSourceError",
    "ReportTooLargeError",
    "SpreadsheetTextSerializer",
    "checkpoint_interval",
    "create_serializer",
    "media_type_for",
    "parse_filters",
    "progress_percent",
    "resolve_columns",
]
