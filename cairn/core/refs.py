"""Branch pointers, HEAD, and the remote registry.

Layout inside the repository directory::

    HEAD                      name of the checked-out branch
    branches/{name}           commit digest of a local branch
    branches/{remote}/{name}  remote-tracking pointer, addressed "remote/name"
    remotes.json              remote name -> location

Branch pointers and HEAD are the only mutable state besides the staging
area; every write goes through ``atomic_write``.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from cairn.core.object_store import atomic_write

logger = logging.getLogger(__name__)


def _validate_ref_name(name: str) -> list[str]:
    parts = name.split("/")
    if not name or any(p in ("", ".", "..") for p in parts) or len(parts) > 2:
        raise ValueError(f"Invalid branch name: {name!r}")
    return parts


def is_valid_ref_name(name: str) -> bool:
    try:
        _validate_ref_name(name)
    except ValueError:
        return False
    return True


class RefStore:
    """File-backed branch pointers plus the HEAD record.

    Parameters
    ----------
    repo_dir:
        The repository marker directory (e.g. ``.cairn``).
    """

    def __init__(self, repo_dir: Path) -> None:
        self._repo_dir = Path(repo_dir)
        self._branches = self._repo_dir / "branches"
        self._head = self._repo_dir / "HEAD"
        self._branches.mkdir(parents=True, exist_ok=True)

    def _branch_path(self, name: str) -> Path:
        return self._branches.joinpath(*_validate_ref_name(name))

    # ------------------------------------------------------------------
    # HEAD
    # ------------------------------------------------------------------

    @property
    def head(self) -> str:
        """Name of the currently checked-out branch."""
        return self._head.read_text(encoding="utf-8").strip()

    def set_head(self, branch: str) -> None:
        atomic_write(self._head, branch.encode("utf-8"))
        logger.debug("HEAD -> %s", branch)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def has_branch(self, name: str) -> bool:
        try:
            return self._branch_path(name).is_file()
        except ValueError:
            return False

    def get_branch(self, name: str) -> str | None:
        """Return the commit digest a branch points to, or None."""
        if not self.has_branch(name):
            return None
        return self._branch_path(name).read_text(encoding="utf-8").strip()

    def write_branch(self, name: str, digest: str) -> None:
        atomic_write(self._branch_path(name), digest.encode("utf-8"))
        logger.debug("Branch %s -> %s", name, digest[:12])

    def delete_branch(self, name: str) -> None:
        self._branch_path(name).unlink(missing_ok=True)
        logger.debug("Deleted branch %s", name)

    def local_branches(self) -> list[str]:
        """Local branch names, sorted; remote-tracking pointers excluded."""
        return sorted(
            p.name
            for p in self._branches.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    def remote_branches(self, remote: str) -> list[str]:
        """Remote-tracking pointers for ``remote`` as "remote/branch" names."""
        remote_dir = self._branches / remote
        if not remote_dir.is_dir():
            return []
        return sorted(
            f"{remote}/{p.name}"
            for p in remote_dir.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    def drop_remote_namespace(self, remote: str) -> None:
        """Delete every remote-tracking pointer of ``remote``."""
        _validate_ref_name(remote)
        remote_dir = self._branches / remote
        if remote_dir.is_dir():
            shutil.rmtree(remote_dir)

    def has_namespace(self, name: str) -> bool:
        """True if ``name`` holds remote-tracking pointers (a directory)."""
        if not is_valid_ref_name(name) or "/" in name:
            return False
        return (self._branches / name).is_dir()


class RemoteRegistry:
    """Persistent mapping of remote name -> location (path or address)."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._remotes: dict[str, str] = {}
        if self._path.exists():
            self._remotes = json.loads(self._path.read_text(encoding="utf-8"))

    def __contains__(self, name: str) -> bool:
        return name in self._remotes

    def get(self, name: str) -> str | None:
        return self._remotes.get(name)

    def add(self, name: str, location: str) -> None:
        self._remotes[name] = location
        self._save()

    def remove(self, name: str) -> None:
        self._remotes.pop(name, None)
        self._save()

    def _save(self) -> None:
        atomic_write(
            self._path,
            json.dumps(self._remotes, indent=2, sort_keys=True).encode("utf-8"),
        )
