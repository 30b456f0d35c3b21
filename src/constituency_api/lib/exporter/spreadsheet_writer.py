"""Spreadsheet-compatible CSV writer.

Same layout as the plain CSV export, but starts with a UTF-8 byte order
mark and uses CRLF line endings so Excel opens non-ASCII names (Devanagari,
Urdu, ...) with the right encoding.
"""

from typing import ClassVar

from constituency_api.lib.exporter.base import ExportWriter
from constituency_api.lib.exporter.csv_writer import DelimitedTextSerializer

_UTF8_BOM = "\ufeff"


class SpreadsheetTextSerializer(DelimitedTextSerializer):
    """CSV flavoured for spreadsheet applications."""

    media_type: ClassVar[str] = "text/csv; charset=utf-8"
    line_terminator: ClassVar[str] = "\r\n"

    def _preamble(self, writer: ExportWriter) -> None:
        writer.stream.write(_UTF8_BOM)
