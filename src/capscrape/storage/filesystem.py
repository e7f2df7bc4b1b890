"""Filesystem storage backend for registry snapshots."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from capscrape.core.errors import SnapshotReadError, SnapshotWriteError
from capscrape.core.interfaces import StorageBackend
from capscrape.core.models import RegistryData

logger = logging.getLogger(__name__)


class FilesystemStorage(StorageBackend):
    """Store the registry snapshot as a single JSON file."""

    async def save_snapshot(self, data: RegistryData, path: Path) -> None:
        """Write the snapshot atomically.

        The JSON is written to a temporary file next to the target and then
        renamed over it, so readers see either the old or the new snapshot.

        Args:
            data: Snapshot to save.
            path: Target filepath.

        Raises:
            SnapshotWriteError: If the snapshot could not be written. The
                previous file, if any, is left untouched.
        """
        path = Path(path)
        content = json.dumps(data.to_dict(), indent=2, ensure_ascii=False)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotWriteError(f"Could not create {path.parent}: {e}") from e

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
            )
        except OSError as e:
            raise SnapshotWriteError(f"Could not write {path}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise SnapshotWriteError(f"Could not write {path}: {e}") from e

        logger.debug("Wrote snapshot with %d providers to %s", len(data.providers), path)

    async def load_snapshot(self, path: Path) -> Optional[RegistryData]:
        """Load a snapshot.

        Args:
            path: Snapshot filepath.

        Returns:
            The snapshot, or None if it has not been produced yet.

        Raises:
            SnapshotReadError: If the file exists but is not a valid snapshot.
        """
        path = Path(path)
        if not path.exists():
            return None

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return RegistryData.from_dict(raw)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise SnapshotReadError(f"Could not load snapshot {path}: {e}") from e
