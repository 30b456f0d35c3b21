"""Serializer interface shared by all export formats.

The worker drives every format through the same three calls::

    writer = serializer.begin(columns, name, expected_rows=total)
    for row in rows:
        serializer.write_row(writer, row)
    metadata = serializer.end(writer)

and calls :meth:`ExportSerializer.abort` instead of ``end`` when the job
fails or is cancelled, which removes the partial file.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, TextIO

from loguru import logger

from constituency_api.lib.exporter.columns import ExportColumn
from constituency_api.lib.exporter.errors import ArtifactWriteError
from constituency_api.lib.exporter.storage import LocalArtifactStore


@dataclass
class ArtifactMetadata:
    """Result of a finished export file."""

    name: str
    location: str
    record_count: int
    size_bytes: int

    @property
    def size_kb(self) -> int:
        return round(self.size_bytes / 1024)


@dataclass
class ExportWriter:
    """Open output handle for one export in progress."""

    columns: list[ExportColumn]
    name: str
    path: Path
    stream: TextIO
    row_count: int = 0
    state: dict[str, Any] = field(default_factory=dict)


class ExportSerializer(ABC):
    """Base class for format serializers.

    Subclasses implement the header/row/footer hooks; file handling,
    row counting and artifact publishing live here.
    """

    extension: ClassVar[str]
    media_type: ClassVar[str]
    encoding: ClassVar[str] = "utf-8"
    newline: ClassVar[str | None] = ""

    def __init__(self, store: LocalArtifactStore) -> None:
        self._store = store

    def begin(
        self,
        columns: list[ExportColumn],
        name: str,
        *,
        expected_rows: int | None = None,
    ) -> ExportWriter:
        """Open a new artifact and write its header.

        Args:
            columns: Ordered column manifest.
            name: Artifact file name without extension.
            expected_rows: Row count known in advance, if any.

        Returns:
            The writer handle to pass to write_row/end/abort.
        """
        self._check_expected_rows(expected_rows)
        file_name = f"{name}.{self.extension}"
        path = self._store.partial_path(file_name)
        try:
            stream = path.open("w", encoding=self.encoding, newline=self.newline)
        except OSError as e:
            msg = "Could not create the export file."
            raise ArtifactWriteError(msg) from e
        writer = ExportWriter(columns=columns, name=file_name, path=path, stream=stream)
        try:
            self._write_header(writer)
        except OSError as e:
            self.abort(writer)
            msg = "Could not write the export file."
            raise ArtifactWriteError(msg) from e
        return writer

    def write_row(self, writer: ExportWriter, row: Mapping[str, Any]) -> None:
        """Append one record to the artifact."""
        self._check_row_limit(writer)
        try:
            self._write_row(writer, row)
        except OSError as e:
            msg = "Could not write the export file."
            raise ArtifactWriteError(msg) from e
        writer.row_count += 1

    def end(self, writer: ExportWriter) -> ArtifactMetadata:
        """Write the footer, close and publish the artifact."""
        try:
            self._write_footer(writer)
            writer.stream.close()
            size_bytes = writer.path.stat().st_size
            location = self._store.publish(writer.path)
        except OSError as e:
            self.abort(writer)
            msg = "Could not finalize the export file."
            raise ArtifactWriteError(msg) from e
        return ArtifactMetadata(
            name=writer.name,
            location=location,
            record_count=writer.row_count,
            size_bytes=size_bytes,
        )

    def abort(self, writer: ExportWriter) -> None:
        """Close and remove a partially written artifact."""
        try:
            writer.stream.close()
        except OSError:
            logger.warning(f"Failed to close partial export file {writer.path}")
        self._store.discard(writer.path)

    def _check_expected_rows(self, expected_rows: int | None) -> None:  # noqa: B027
        """Hook for formats that refuse oversized exports up front."""

    def _check_row_limit(self, writer: ExportWriter) -> None:  # noqa: B027
        """Hook for formats with a row ceiling."""

    @abstractmethod
    def _write_header(self, writer: ExportWriter) -> None: ...

    @abstractmethod
    def _write_row(self, writer: ExportWriter, row: Mapping[str, Any]) -> None: ...

    def _write_footer(self, writer: ExportWriter) -> None:  # noqa: B027
        """Optional trailer written before the file is closed."""
