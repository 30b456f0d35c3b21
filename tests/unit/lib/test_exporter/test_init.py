"""Tests for the exporter package entry points."""

from pathlib import Path

import pytest

from constituency_api.lib.exporter import (
    SUPPORTED_FORMATS,
    DelimitedTextSerializer,
    ExportValidationError,
    LocalArtifactStore,
    PrintableReportSerializer,
    SpreadsheetTextSerializer,
    create_serializer,
    media_type_for,
)


class TestCreateSerializer:
    """Tests for create_serializer."""

    def test_supported_formats(self) -> None:
        assert SUPPORTED_FORMATS == ["csv", "excel", "pdf"]

    @pytest.mark.parametrize(
        ("output_format", "expected"),
        [
            ("csv", DelimitedTextSerializer),
            ("excel", SpreadsheetTextSerializer),
            ("pdf", PrintableReportSerializer),
        ],
    )
    def test_format_mapping(self, tmp_path: Path, output_format: str, expected: type) -> None:
        serializer = create_serializer(output_format, LocalArtifactStore(tmp_path))
        assert type(serializer) is expected

    def test_report_options_passed_through(self, tmp_path: Path) -> None:
        serializer = create_serializer(
            "pdf",
            LocalArtifactStore(tmp_path),
            report_max_rows=42,
            filter_description="Ward: W1",
        )
        assert isinstance(serializer, PrintableReportSerializer)
        assert serializer.max_rows == 42
        assert serializer.filter_description == "Ward: W1"

    def test_unsupported_format(self, tmp_path: Path) -> None:
        with pytest.raises(ExportValidationError, match="Unsupported format"):
            create_serializer("xml", LocalArtifactStore(tmp_path))


class TestMediaTypeFor:
    """Tests for media_type_for."""

    def test_known_formats(self) -> None:
        assert media_type_for("csv") == "text/csv"
        assert media_type_for("pdf") == "text/html"

    def test_unknown_format(self) -> None:
        assert media_type_for("bin") == "application/octet-stream"
