"""Staging area: pending additions and removals for the next commit.

A path is never staged for addition and removal at the same time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from cairn.core.object_store import atomic_write

logger = logging.getLogger(__name__)


class StagingArea:
    """Mutable ``added``/``removed`` maps of path -> blob digest.

    Parameters
    ----------
    path:
        Where the staging record is persisted. ``None`` keeps it in memory.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self.added: dict[str, str] = {}
        self.removed: dict[str, str] = {}
        if self._path is not None and self._path.exists():
            data = json.loads(self._path.read_text(encoding="utf-8"))
            self.added = dict(data.get("added", {}))
            self.removed = dict(data.get("removed", {}))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def stage_add(self, path: str, digest: str, tracked_digest: str | None) -> bool:
        """Stage ``path`` with content ``digest``.

        ``tracked_digest`` is the digest HEAD records for ``path`` (or None).
        Returns True when a new addition was recorded and the caller must
        persist the blob.
        """
        if path in self.removed:
            # Re-adding a removed file restores it without staging an add.
            del self.removed[path]
            logger.debug("Unstaged removal of %s", path)
            return False
        if tracked_digest == digest:
            self.added.pop(path, None)
            return False
        self.added[path] = digest
        logger.debug("Staged %s as %s", path, digest[:12])
        return True

    def stage_remove(self, path: str, digest: str) -> None:
        """Stage ``path`` for removal, dropping any pending addition."""
        self.removed[path] = digest
        self.added.pop(path, None)
        logger.debug("Staged removal of %s", path)

    def unstage(self, path: str) -> bool:
        """Drop a pending addition; returns whether one existed."""
        return self.added.pop(path, None) is not None

    def clear(self) -> None:
        self.added = {}
        self.removed = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def is_staged(self, path: str) -> bool:
        return path in self.added or path in self.removed

    def apply_to(self, blobs: Mapping[str, str]) -> dict[str, str]:
        """Return ``blobs`` with the staged additions and removals applied."""
        result = dict(blobs)
        result.update(self.added)
        for path in self.removed:
            result.pop(path, None)
        return result

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        if self._path is None:
            return
        payload = {"added": self.added, "removed": self.removed}
        atomic_write(
            self._path,
            json.dumps(payload, indent=2, sort_keys=True).encode("utf-8"),
        )
