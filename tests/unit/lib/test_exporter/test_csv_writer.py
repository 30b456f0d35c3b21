"""Tests for the delimited-text (CSV) serializer."""

import csv
from pathlib import Path

import pytest

from constituency_api.lib.exporter.columns import resolve_columns
from constituency_api.lib.exporter.csv_writer import DelimitedTextSerializer, _sanitize_cell
from constituency_api.lib.exporter.storage import LocalArtifactStore


@pytest.fixture
def store(tmp_path: Path) -> LocalArtifactStore:
    return LocalArtifactStore(tmp_path)


def _read(store: LocalArtifactStore, location: str) -> list[list[str]]:
    with store.resolve(location).open(newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


class TestSanitizeCell:
    """Tests for CSV formula-injection sanitisation."""

    @pytest.mark.parametrize("value", ["=SUM(A1)", "+91 98000", "-1", "@cmd", "\tx", "\rx"])
    def test_formula_prefixes_quoted(self, value: str) -> None:
        assert _sanitize_cell(value) == f"'{value}"

    def test_plain_values_untouched(self) -> None:
        assert _sanitize_cell("Anita Sharma") == "Anita Sharma"
        assert _sanitize_cell("") == ""


class TestDelimitedTextSerializer:
    """Tests for DelimitedTextSerializer."""

    def test_writes_header_and_rows(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        columns = resolve_columns(["epic_number", "full_name", "is_voted_2024"])
        writer = serializer.begin(columns, "voters_export")
        serializer.write_row(writer, {"epic_number": "EPC1", "full_name": "Anita", "is_voted_2024": True})
        serializer.write_row(writer, {"epic_number": "EPC2", "full_name": None, "is_voted_2024": False})
        artifact = serializer.end(writer)

        assert artifact.record_count == 2
        assert artifact.name == "voters_export.csv"
        assert artifact.size_bytes == store.resolve(artifact.location).stat().st_size
        assert _read(store, artifact.location) == [
            ["EPIC Number", "Full Name", "Voted 2024"],
            ["EPC1", "Anita", "Yes"],
            ["EPC2", "", "No"],
        ]

    def test_every_cell_quoted(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        writer = serializer.begin(resolve_columns(["age"]), "quoted")
        serializer.write_row(writer, {"age": 30})
        artifact = serializer.end(writer)

        content = store.resolve(artifact.location).read_text(encoding="utf-8")
        assert content == '"Age"\n"30"\n'

    def test_formula_cells_sanitised(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        writer = serializer.begin(resolve_columns(["full_name"]), "injection")
        serializer.write_row(writer, {"full_name": "=HYPERLINK(\"x\")"})
        artifact = serializer.end(writer)

        assert _read(store, artifact.location)[1] == ["'=HYPERLINK(\"x\")"]

    def test_empty_export_has_header_only(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        writer = serializer.begin(resolve_columns(["epic_number"]), "empty", expected_rows=0)
        artifact = serializer.end(writer)

        assert artifact.record_count == 0
        assert _read(store, artifact.location) == [["EPIC Number"]]

    def test_partial_file_until_published(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        writer = serializer.begin(resolve_columns(["epic_number"]), "in_progress")

        assert writer.path.name == "in_progress.csv.part"
        assert writer.path.exists()
        serializer.end(writer)
        assert not writer.path.exists()

    def test_abort_removes_partial(self, store: LocalArtifactStore) -> None:
        serializer = DelimitedTextSerializer(store)
        writer = serializer.begin(resolve_columns(["epic_number"]), "aborted")
        serializer.write_row(writer, {"epic_number": "EPC1"})

        serializer.abort(writer)

        assert not writer.path.exists()
        assert list(store.base_dir.rglob("*.csv*")) == []
