"""Local filesystem sink for export artifacts.

Artifacts are laid out as ``{base_dir}/{year}/{month}/{name}``. Serializers
write to a ``.part`` file first; only :meth:`LocalArtifactStore.publish`
makes the finished file visible under its final name.
"""

from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

_PARTIAL_SUFFIX = ".part"


class LocalArtifactStore:
    """Stores finished export files on the local filesystem.

    Args:
        base_dir: The root directory for export artifacts.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def partial_path(self, name: str) -> Path:
        """Return the in-progress path for an artifact named ``name``.

        Creates the year/month directory as needed.
        """
        now = datetime.now(tz=UTC)
        directory = self._base_dir / str(now.year) / f"{now.month:02d}"
        directory.mkdir(parents=True, exist_ok=True)
        return directory / f"{name}{_PARTIAL_SUFFIX}"

    def publish(self, partial: Path) -> str:
        """Atomically move a finished ``.part`` file to its final name.

        Args:
            partial: Path returned by :meth:`partial_path`.

        Returns:
            The stored reference, relative to the base directory.
        """
        final = partial.with_name(partial.name.removesuffix(_PARTIAL_SUFFIX))
        partial.replace(final)
        return final.relative_to(self._base_dir).as_posix()

    def resolve(self, stored_path: str) -> Path:
        """Map a stored reference back to a path inside the base directory.

        Raises:
            FileNotFoundError: If the reference escapes the base directory.
        """
        base = self._base_dir.resolve()
        full_path = (base / stored_path).resolve()
        if not full_path.is_relative_to(base):
            msg = f"Artifact path outside export directory: {stored_path}"
            raise FileNotFoundError(msg)
        return full_path

    def delete(self, stored_path: str) -> bool:
        """Delete a published artifact.

        Returns:
            True if a file was removed, False if it was already gone.
        """
        try:
            path = self.resolve(stored_path)
        except FileNotFoundError:
            return False
        return self.discard(path)

    @staticmethod
    def discard(path: Path) -> bool:
        """Remove a file (partial or published) if it exists."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Removed export artifact {path}")
        return True
