"""Working-tree synchronizer.

Reconciles the files on disk with a commit snapshot. Every destructive
operation first checks for untracked files it would clobber and aborts
before touching anything if it finds one.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from cairn.core.errors import DomainError, ObjectNotFoundError
from cairn.core.hasher import sha256_hex
from cairn.core.object_store import ObjectStore
from cairn.core.staging import StagingArea
from cairn.models.commit import Commit

logger = logging.getLogger(__name__)

UNTRACKED_IN_THE_WAY = (
    "There is an untracked file in the way; delete it, or add and commit it first."
)


class WorkingTree:
    """The user's files under ``root``, excluding the repository directory.

    Paths handed to and returned from this class are POSIX-style and
    relative to ``root``.
    """

    def __init__(self, root: Path, store: ObjectStore, repo_dir_name: str = ".cairn") -> None:
        self._root = Path(root)
        self._store = store
        self._repo_dir_name = repo_dir_name

    @property
    def root(self) -> Path:
        return self._root

    def normalize(self, path: str | Path) -> str:
        """Turn a user-supplied path into a repository-relative POSIX path."""
        p = Path(path)
        if p.is_absolute():
            try:
                p = p.resolve().relative_to(self._root.resolve())
            except ValueError:
                raise DomainError("File does not exist.") from None
        rel = PurePosixPath(p.as_posix())
        if not rel.parts or ".." in rel.parts or rel.parts[0] == self._repo_dir_name:
            raise DomainError("File does not exist.")
        return rel.as_posix()

    def _abs(self, path: str) -> Path:
        return self._root / path

    # ------------------------------------------------------------------
    # File primitives
    # ------------------------------------------------------------------

    def files(self) -> set[str]:
        """All regular files on disk, as relative paths."""
        result: set[str] = set()
        for p in self._root.rglob("*"):
            rel = p.relative_to(self._root)
            if rel.parts[0] == self._repo_dir_name or not p.is_file():
                continue
            result.add(rel.as_posix())
        return result

    def exists(self, path: str) -> bool:
        return self._abs(path).is_file()

    def read(self, path: str) -> bytes:
        return self._abs(path).read_bytes()

    def digest_of(self, path: str) -> str:
        return sha256_hex(self.read(path))

    def write(self, path: str, data: bytes) -> None:
        target = self._abs(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def delete(self, path: str) -> None:
        """Remove a file and any directories it leaves empty."""
        target = self._abs(path)
        target.unlink(missing_ok=True)
        parent = target.parent
        while parent != self._root and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent
        logger.debug("Deleted %s from working tree", path)

    # ------------------------------------------------------------------
    # Synchronization
    # ------------------------------------------------------------------

    def restore_file(self, path: str, commit: Commit) -> None:
        """Overwrite ``path`` with its content in ``commit``."""
        digest = commit.blobs.get(path)
        if digest is None:
            raise DomainError("File does not exist in that commit.")
        data = self._store.get(digest)
        if self.exists(path):
            self._abs(path).unlink()
        self.write(path, data)
        logger.debug("Restored %s from %s", path, commit.short_id)

    def untracked_files(self, commit: Commit, staging: StagingArea) -> list[str]:
        """Files on disk that neither ``commit`` nor the staging area knows."""
        return sorted(
            path
            for path in self.files()
            if path not in commit.blobs and not staging.is_staged(path)
        )

    def check_untracked(self, commit: Commit, staging: StagingArea, incoming: set[str]) -> None:
        """Raise if an untracked file would be overwritten by ``incoming`` paths."""
        blocking = [p for p in self.untracked_files(commit, staging) if p in incoming]
        if blocking:
            logger.debug("Untracked files in the way: %s", blocking)
            raise DomainError(UNTRACKED_IN_THE_WAY)

    def switch_to(self, commit: Commit, previous: Commit, staging: StagingArea) -> None:
        """Make the working tree match ``commit``, coming from ``previous``.

        Files tracked by ``previous`` but absent from ``commit`` are deleted;
        every file in ``commit`` is restored. Nothing is touched if an
        untracked file would be overwritten.
        """
        self.check_untracked(previous, staging, set(commit.blobs))
        missing = [d for d in commit.blobs.values() if not self._store.has_blob(d)]
        if missing:
            raise ObjectNotFoundError(f"Blob not found: {missing[0]}")

        for path in sorted(previous.blobs):
            if path not in commit.blobs and self.exists(path):
                self.delete(path)
        for path in sorted(commit.blobs):
            self.restore_file(path, commit)
        logger.debug("Working tree now matches %s", commit.short_id)
