"""Tests for the local artifact store."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from constituency_api.lib.exporter.storage import LocalArtifactStore


class TestLocalArtifactStore:
    """Tests for LocalArtifactStore."""

    def test_partial_path_layout(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path)
        path = store.partial_path("voters.csv")
        now = datetime.now(UTC)

        assert path.name == "voters.csv.part"
        assert path.parent == tmp_path / str(now.year) / f"{now.month:02d}"
        assert path.parent.is_dir()

    def test_publish_renames_and_returns_relative_reference(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path)
        partial = store.partial_path("voters.csv")
        partial.write_text("data")

        stored = store.publish(partial)

        assert not partial.exists()
        assert stored.endswith("/voters.csv")
        assert not Path(stored).is_absolute()
        assert store.resolve(stored).read_text() == "data"

    def test_resolve_rejects_escape(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path / "exports")
        with pytest.raises(FileNotFoundError):
            store.resolve("../../etc/passwd")

    def test_delete(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path)
        partial = store.partial_path("voters.csv")
        partial.write_text("data")
        stored = store.publish(partial)

        assert store.delete(stored) is True
        assert not store.resolve(stored).exists()

    def test_delete_missing_is_ignored(self, tmp_path: Path) -> None:
        store = LocalArtifactStore(tmp_path)
        assert store.delete("2026/01/gone.csv") is False
        assert store.delete("../outside.csv") is False
