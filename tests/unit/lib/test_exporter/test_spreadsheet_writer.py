"""Tests for the spreadsheet-compatible serializer."""

from pathlib import Path

from constituency_api.lib.exporter.columns import resolve_columns
from constituency_api.lib.exporter.spreadsheet_writer import SpreadsheetTextSerializer
from constituency_api.lib.exporter.storage import LocalArtifactStore


class TestSpreadsheetTextSerializer:
    """Tests for SpreadsheetTextSerializer."""

    def test_bom_and_crlf(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path)
        serializer = SpreadsheetTextSerializer(store)
        writer = serializer.begin(resolve_columns(["full_name", "gender"]), "sheet")
        serializer.write_row(writer, {"full_name": "अनीता शर्मा", "gender": "F"})
        artifact = serializer.end(writer)

        raw = store.resolve(artifact.location).read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        text = raw.decode("utf-8-sig")
        assert text == '"Full Name","Gender"\r\n"अनीता शर्मा","F"\r\n'

    def test_extension_is_csv(self, tmp_path: Path) -> None:
        serializer = SpreadsheetTextSerializer(LocalArtifactStore(tmp_path))
        writer = serializer.begin(resolve_columns(["age"]), "sheet")
        artifact = serializer.end(writer)

        assert artifact.name == "sheet.csv"
        assert "charset=utf-8" in SpreadsheetTextSerializer.media_type
