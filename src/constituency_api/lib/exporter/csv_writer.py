"""CSV export writer for voter data."""

import csv
from collections.abc import Mapping
from typing import Any, ClassVar

from constituency_api.lib.exporter.base import ExportSerializer, ExportWriter

# Characters that trigger formula execution in spreadsheet applications
_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def _sanitize_cell(value: str) -> str:
    """Sanitize a cell value to prevent CSV formula injection.

    Prefixes values starting with formula-triggering characters with
    a single quote to prevent execution in spreadsheet applications.

    Args:
        value: The cell value to sanitize.

    Returns:
        The sanitized value.
    """
    if value and value[0] in _FORMULA_PREFIXES:
        return f"'{value}"
    return value


class DelimitedTextSerializer(ExportSerializer):
    """Comma-separated output with a label header and every cell quoted.

    Rows are written as they arrive; nothing is buffered beyond the
    current row.
    """

    extension: ClassVar[str] = "csv"
    media_type: ClassVar[str] = "text/csv"
    line_terminator: ClassVar[str] = "\n"

    def _write_header(self, writer: ExportWriter) -> None:
        self._preamble(writer)
        csv_writer = csv.writer(writer.stream, quoting=csv.QUOTE_ALL, lineterminator=self.line_terminator)
        writer.state["csv"] = csv_writer
        csv_writer.writerow([column.label for column in writer.columns])

    def _write_row(self, writer: ExportWriter, row: Mapping[str, Any]) -> None:
        writer.state["csv"].writerow([_sanitize_cell(column.format(row.get(column.key))) for column in writer.columns])

    def _preamble(self, writer: ExportWriter) -> None:
        """Bytes that precede the header row (none for plain CSV)."""
