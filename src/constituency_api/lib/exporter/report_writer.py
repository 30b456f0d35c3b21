"""Printable HTML report writer.

Produces a self-contained document (header, numbered table, summary
footer) meant to be printed or saved as PDF from a browser. Reports are
capped at ``max_rows``: anything larger is refused instead of producing a
document nobody can print.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from html import escape
from typing import Any, ClassVar

from constituency_api.lib.exporter.base import ExportSerializer, ExportWriter
from constituency_api.lib.exporter.errors import ReportTooLargeError
from constituency_api.lib.exporter.storage import LocalArtifactStore

DEFAULT_REPORT_MAX_ROWS = 5000

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: 'Segoe UI', system-ui, sans-serif; color: #1a1a1a; padding: 2rem; }
    .header { background: #1e3a5f; color: white; padding: 1.5rem; border-radius: 8px; margin-bottom: 1.5rem; }
    .header h1 { font-size: 1.5rem; margin-bottom: 0.25rem; }
    .header .meta { font-size: 0.85rem; opacity: 0.9; }
    table { width: 100%; border-collapse: collapse; font-size: 0.8rem; }
    th { background: #f1f5f9; text-align: left; padding: 0.5rem; border-bottom: 2px solid #e2e8f0; }
    td { padding: 0.4rem 0.5rem; border-bottom: 1px solid #f1f5f9; }
    .summary { display: flex; gap: 1rem; margin-top: 1.5rem; }
    .summary div { border: 1px solid #e2e8f0; border-radius: 6px; padding: 0.75rem 1rem; }
    .summary .label { font-size: 0.7rem; text-transform: uppercase; color: #64748b; }
    .summary .value { font-size: 1.2rem; font-weight: 700; color: #1e3a5f; }
    @media print {
      body { padding: 0; }
      .header { -webkit-print-color-adjust: exact; print-color-adjust: exact; }
      thead { display: table-header-group; }
    }
"""


class PrintableReportSerializer(ExportSerializer):
    """HTML report with a hard row ceiling.

    Args:
        store: Artifact sink.
        max_rows: Largest number of rows a report may contain.
        title: Document heading.
        filter_description: Human-readable summary of the applied filters.
    """

    extension: ClassVar[str] = "html"
    media_type: ClassVar[str] = "text/html"

    def __init__(
        self,
        store: LocalArtifactStore,
        *,
        max_rows: int = DEFAULT_REPORT_MAX_ROWS,
        title: str = "Voter Export Report",
        filter_description: str = "All Records",
    ) -> None:
        super().__init__(store)
        self.max_rows = max_rows
        self.title = title
        self.filter_description = filter_description

    def _check_expected_rows(self, expected_rows: int | None) -> None:
        if expected_rows is not None and expected_rows > self.max_rows:
            raise ReportTooLargeError(expected_rows, self.max_rows)

    def _check_row_limit(self, writer: ExportWriter) -> None:
        if writer.row_count >= self.max_rows:
            raise ReportTooLargeError(writer.row_count + 1, self.max_rows)

    def _write_header(self, writer: ExportWriter) -> None:
        generated = datetime.now(UTC).strftime("%d %b %Y, %H:%M UTC")
        writer.state.update(male=0, female=0, with_phone=0)
        headers = "".join(f"<th>{escape(column.label)}</th>" for column in writer.columns)
        writer.stream.write(
            "<!DOCTYPE html>\n"
            '<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
            f"<title>{escape(self.title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n"
            f'<div class="header"><h1>{escape(self.title)}</h1>'
            f'<div class="meta">Generated on {generated} | Filters: {escape(self.filter_description)}</div></div>\n'
            f"<table>\n<thead><tr><th>#</th>{headers}</tr></thead>\n<tbody>\n"
        )

    def _write_row(self, writer: ExportWriter, row: Mapping[str, Any]) -> None:
        cells = []
        for column in writer.columns:
            text = column.format(row.get(column.key))
            cells.append(f"<td>{escape(text) if text else '-'}</td>")
        writer.stream.write(f"<tr><td>{writer.row_count + 1}</td>{''.join(cells)}</tr>\n")

        gender = row.get("gender")
        if gender == "M":
            writer.state["male"] += 1
        elif gender == "F":
            writer.state["female"] += 1
        if row.get("mobile_number"):
            writer.state["with_phone"] += 1

    def _write_footer(self, writer: ExportWriter) -> None:
        keys = {column.key for column in writer.columns}
        cards = [("Total Records", writer.row_count)]
        if "gender" in keys:
            cards += [("Male", writer.state["male"]), ("Female", writer.state["female"])]
        if "mobile_number" in keys:
            cards.append(("With Phone", writer.state["with_phone"]))
        summary = "".join(
            f'<div><div class="label">{label}</div><div class="value">{value:,}</div></div>' for label, value in cards
        )
        writer.stream.write(f'</tbody>\n</table>\n<div class="summary">{summary}</div>\n</body>\n</html>\n')
