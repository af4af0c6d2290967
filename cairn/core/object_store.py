"""Content-addressed, append-only object store for blobs and commits.

Storage layout::

    {base}/blobs/{sha256[0:2]}/{sha256[2:4]}/{sha256}.dat
    {base}/commits/{sha256[0:2]}/{sha256[2:4]}/{sha256}.json

There is no delete method: objects are immutable once stored.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from cairn.core.errors import CorruptObjectError, DomainError, ObjectNotFoundError
from cairn.core.hasher import canonical_json_bytes, sha256_hex
from cairn.models.commit import Commit

logger = logging.getLogger(__name__)

# Shortest abbreviated commit id accepted by ``resolve_prefix``.
MIN_PREFIX_LENGTH = 4


class ObjectStore(Protocol):
    """Capabilities every object store backend provides."""

    def put(self, data: bytes) -> str: ...

    def get(self, digest: str) -> bytes: ...

    def has_blob(self, digest: str) -> bool: ...

    def blob_digests(self) -> set[str]: ...

    def put_commit(self, commit: Commit) -> str: ...

    def get_commit(self, digest: str) -> Commit: ...

    def has_commit(self, digest: str) -> bool: ...

    def commit_digests(self) -> set[str]: ...

    def iter_commits(self) -> Iterator[Commit]: ...

    def resolve_prefix(self, prefix: str) -> str: ...


def decode_commit(raw: bytes, digest: str) -> Commit:
    """Deserialize a stored commit and check it still hashes to ``digest``."""
    try:
        commit = Commit.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        raise CorruptObjectError(f"Commit {digest} could not be decoded: {exc}") from exc
    expected = commit.compute_digest()
    if commit.digest != digest or expected != digest:
        raise CorruptObjectError(
            f"Commit {digest} failed integrity check "
            f"(recorded={commit.digest!r}, recomputed={expected!r})"
        )
    return commit


def _match_prefix(prefix: str, digests: set[str]) -> str:
    if prefix in digests:
        return prefix
    if len(prefix) < MIN_PREFIX_LENGTH:
        raise DomainError("No commit with that id exists.")
    matches = [d for d in digests if d.startswith(prefix)]
    if len(matches) != 1:
        raise DomainError("No commit with that id exists.")
    return matches[0]


def atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a temp file + ``os.replace``.

    Readers never observe a partially written object.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}_", suffix=".tmp"
    )
    try:
        with os.fdopen(tmp_fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


class FileObjectStore:
    """SHA-256 keyed, immutable on-disk object store.

    Storing the same content twice is a no-op (idempotent).

    Parameters
    ----------
    base_path:
        Root directory for object storage (usually ``.cairn/objects``).
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._blobs = self._base / "blobs"
        self._commits = self._base / "commits"
        self._blobs.mkdir(parents=True, exist_ok=True)
        self._commits.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    @staticmethod
    def _fanout(root: Path, digest: str, suffix: str) -> Path:
        return root / digest[:2] / digest[2:4] / f"{digest}{suffix}"

    @staticmethod
    def _scan(root: Path, suffix: str) -> set[str]:
        return {p.name[: -len(suffix)] for p in root.glob(f"*/*/*{suffix}")}

    # ------------------------------------------------------------------
    # Blobs
    # ------------------------------------------------------------------

    def put(self, data: bytes) -> str:
        """Store raw bytes and return their digest."""
        digest = sha256_hex(data)
        path = self._fanout(self._blobs, digest, ".dat")
        if not path.exists():
            atomic_write(path, data)
            logger.debug("Stored blob %s (%d bytes)", digest[:12], len(data))
        return digest

    def get(self, digest: str) -> bytes:
        path = self._fanout(self._blobs, digest, ".dat")
        if not path.exists():
            raise ObjectNotFoundError(f"Blob not found: {digest}")
        return path.read_bytes()

    def has_blob(self, digest: str) -> bool:
        return self._fanout(self._blobs, digest, ".dat").exists()

    def verify_blob(self, digest: str) -> bool:
        """Re-hash stored bytes and compare against the digest."""
        path = self._fanout(self._blobs, digest, ".dat")
        if not path.exists():
            return False
        return sha256_hex(path.read_bytes()) == digest

    def blob_digests(self) -> set[str]:
        return self._scan(self._blobs, ".dat")

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def put_commit(self, commit: Commit) -> str:
        """Persist a sealed commit under its own digest."""
        if not commit.digest:
            raise ValueError("Cannot store an unsealed commit (empty digest)")
        path = self._fanout(self._commits, commit.digest, ".json")
        if not path.exists():
            atomic_write(path, canonical_json_bytes(commit.to_payload()))
            logger.debug("Stored commit %s", commit.short_id)
        return commit.digest

    def get_commit(self, digest: str) -> Commit:
        path = self._fanout(self._commits, digest, ".json")
        if not path.exists():
            raise ObjectNotFoundError(f"Commit not found: {digest}")
        return decode_commit(path.read_bytes(), digest)

    def has_commit(self, digest: str) -> bool:
        return self._fanout(self._commits, digest, ".json").exists()

    def commit_digests(self) -> set[str]:
        return self._scan(self._commits, ".json")

    def iter_commits(self) -> Iterator[Commit]:
        for digest in sorted(self.commit_digests()):
            yield self.get_commit(digest)

    def resolve_prefix(self, prefix: str) -> str:
        """Expand an abbreviated commit id to a full digest."""
        return _match_prefix(prefix, self.commit_digests())


class MemoryObjectStore:
    """In-process object store with the same contract as ``FileObjectStore``."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._commits: dict[str, bytes] = {}

    def put(self, data: bytes) -> str:
        digest = sha256_hex(data)
        self._blobs.setdefault(digest, bytes(data))
        return digest

    def get(self, digest: str) -> bytes:
        try:
            return self._blobs[digest]
        except KeyError:
            raise ObjectNotFoundError(f"Blob not found: {digest}") from None

    def has_blob(self, digest: str) -> bool:
        return digest in self._blobs

    def blob_digests(self) -> set[str]:
        return set(self._blobs)

    def put_commit(self, commit: Commit) -> str:
        if not commit.digest:
            raise ValueError("Cannot store an unsealed commit (empty digest)")
        self._commits.setdefault(
            commit.digest, canonical_json_bytes(commit.to_payload())
        )
        return commit.digest

    def get_commit(self, digest: str) -> Commit:
        try:
            raw = self._commits[digest]
        except KeyError:
            raise ObjectNotFoundError(f"Commit not found: {digest}") from None
        return decode_commit(raw, digest)

    def has_commit(self, digest: str) -> bool:
        return digest in self._commits

    def commit_digests(self) -> set[str]:
        return set(self._commits)

    def iter_commits(self) -> Iterator[Commit]:
        for digest in sorted(self._commits):
            yield self.get_commit(digest)

    def resolve_prefix(self, prefix: str) -> str:
        return _match_prefix(prefix, set(self._commits))
