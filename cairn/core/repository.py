"""Repository handle: every user-facing operation goes through here.

A ``Repository`` is built from an explicit working-tree root and owns the
object store, branch pointers, staging area and remote registry found in
``{root}/{repo_dir_name}``. State is loaded when the handle is opened and
every mutation is written back before the method returns.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from cairn.config import CairnConfig
from cairn.config import config as default_config
from cairn.core import remote as remote_sync
from cairn.core.commit_graph import CommitGraph, History
from cairn.core.errors import DomainError
from cairn.core.hasher import sha256_hex
from cairn.core.merge import MergeEngine, classify
from cairn.core.object_store import FileObjectStore, ObjectStore
from cairn.core.refs import RefStore, RemoteRegistry, is_valid_ref_name
from cairn.core.remote import RemoteEndpoint, TransferReport
from cairn.core.staging import StagingArea
from cairn.core.working_tree import WorkingTree
from cairn.models.commit import Commit
from cairn.models.merge import MergeOutcome, MergeResult
from cairn.models.status import StatusReport

logger = logging.getLogger(__name__)

# Every repository starts from the same root commit, so independently
# initialized repositories share history and can exchange commits.
ROOT_TIMESTAMP = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Repository:
    """An initialized cairn repository rooted at ``root``.

    Use :meth:`init` to create one and :meth:`open` to load an existing one.

    Parameters
    ----------
    root:
        Working-tree root directory.
    config:
        Settings to use; defaults to the module-level ``config``.
    store:
        Object store backend; defaults to a ``FileObjectStore`` inside the
        repository directory.
    """

    def __init__(
        self,
        root: Path,
        *,
        config: CairnConfig | None = None,
        store: ObjectStore | None = None,
    ) -> None:
        self.root = Path(root)
        self.config = config or default_config
        self.repo_dir = self.root / self.config.repo_dir_name
        self.store: ObjectStore = store or FileObjectStore(self.repo_dir / "objects")
        self.refs = RefStore(self.repo_dir)
        self.staging = StagingArea(self.repo_dir / "staging.json")
        self.remotes = RemoteRegistry(self.repo_dir / "remotes.json")
        self.graph = CommitGraph(self.store)
        self.tree = WorkingTree(self.root, self.store, self.config.repo_dir_name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def exists_at(root: Path, config: CairnConfig | None = None) -> bool:
        cfg = config or default_config
        return (Path(root) / cfg.repo_dir_name).is_dir()

    @classmethod
    def init(
        cls,
        root: Path,
        *,
        config: CairnConfig | None = None,
        store: ObjectStore | None = None,
    ) -> Repository:
        """Create a repository with a root commit and the default branch."""
        cfg = config or default_config
        if cls.exists_at(root, cfg):
            raise DomainError(
                "A Cairn version-control system already exists in the current directory."
            )
        (Path(root) / cfg.repo_dir_name).mkdir(parents=True)
        repo = cls(root, config=cfg, store=store)

        initial = Commit.create(
            blobs={},
            message=cfg.initial_message,
            parent=None,
            sequence=0,
            timestamp=ROOT_TIMESTAMP,
        )
        repo.store.put_commit(initial)
        repo.refs.write_branch(cfg.default_branch, initial.digest)
        repo.refs.set_head(cfg.default_branch)
        repo.staging.save()
        logger.info("Initialized repository at %s", repo.repo_dir)
        return repo

    @classmethod
    def open(
        cls,
        root: Path,
        *,
        config: CairnConfig | None = None,
        store: ObjectStore | None = None,
    ) -> Repository:
        """Load an existing repository."""
        cfg = config or default_config
        if not cls.exists_at(root, cfg):
            raise DomainError("Not in an initialized Cairn directory.")
        return cls(root, config=cfg, store=store)

    # ------------------------------------------------------------------
    # HEAD helpers
    # ------------------------------------------------------------------

    @property
    def head_branch(self) -> str:
        return self.refs.head

    @property
    def head_digest(self) -> str:
        digest = self.refs.get_branch(self.head_branch)
        if digest is None:
            raise DomainError("No such branch exists.")
        return digest

    def head_commit(self) -> Commit:
        return self.store.get_commit(self.head_digest)

    def resolve_commit(self, commit_id: str) -> Commit:
        """Look up a commit by full or abbreviated id."""
        return self.store.get_commit(self.store.resolve_prefix(commit_id))

    def _finish_switch(self) -> None:
        self.staging.clear()
        self.staging.save()

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    def add(self, path: str) -> None:
        """Stage the current content of ``path``."""
        rel = self.tree.normalize(path)
        if not self.tree.exists(rel):
            raise DomainError("File does not exist.")
        data = self.tree.read(rel)
        tracked = self.head_commit().blobs.get(rel)
        if self.staging.stage_add(rel, sha256_hex(data), tracked):
            self.store.put(data)
        self.staging.save()

    def rm(self, path: str) -> None:
        """Unstage ``path`` and, if HEAD tracks it, stage its removal."""
        rel = self.tree.normalize(path)
        tracked = self.head_commit().blobs.get(rel)
        staged = rel in self.staging.added
        if tracked is None and not staged:
            raise DomainError("No reason to remove the file.")
        if staged:
            self.staging.unstage(rel)
        if tracked is not None:
            self.staging.stage_remove(rel, tracked)
            if self.tree.exists(rel):
                self.tree.delete(rel)
        self.staging.save()

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def commit(self, message: str) -> Commit:
        """Record the staged changes as a new commit on the current branch."""
        if self.staging.is_empty():
            raise DomainError("No changes added to the commit.")
        if not message.strip():
            raise DomainError("Please enter a commit message.")
        return self._make_commit(message)

    def _make_commit(self, message: str, parent2: str | None = None) -> Commit:
        head = self.head_commit()
        commit = Commit.create(
            blobs=self.staging.apply_to(head.blobs),
            message=message,
            parent=head.digest,
            parent2=parent2,
            sequence=self.graph.max_sequence() + 1,
            timestamp=datetime.now(timezone.utc),
        )
        self.store.put_commit(commit)
        self.refs.write_branch(self.head_branch, commit.digest)
        self.staging.clear()
        self.staging.save()
        logger.info("Committed %s on %s", commit.short_id, self.head_branch)
        return commit

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def log(self) -> History:
        return self.graph.log(self.head_digest)

    def global_log(self) -> list[Commit]:
        return self.graph.global_log()

    def find(self, message: str) -> list[Commit]:
        return self.graph.find_by_message(message)

    def status(self) -> StatusReport:
        head = self.head_commit()
        added = self.staging.added
        removed = self.staging.removed
        on_disk = self.tree.files()

        modified: dict[str, str] = {}
        for path in on_disk:
            digest = self.tree.digest_of(path)
            if path in added:
                if added[path] != digest:
                    modified[path] = "modified"
            elif path in head.blobs and head.blobs[path] != digest:
                modified[path] = "modified"
        for path in added:
            if path not in on_disk:
                modified[path] = "deleted"
        for path in head.blobs:
            if path not in removed and path not in on_disk:
                modified[path] = "deleted"

        return StatusReport(
            current_branch=self.head_branch,
            branches=self.refs.local_branches(),
            staged=sorted(added),
            removed=sorted(removed),
            modified=[f"{p} ({kind})" for p, kind in sorted(modified.items())],
            untracked=self.tree.untracked_files(head, self.staging),
        )

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def branch(self, name: str) -> None:
        """Create branch ``name`` at the current commit."""
        if "/" in name:
            raise DomainError("Branch names cannot contain '/'.")
        if self.refs.has_branch(name):
            raise DomainError("A branch with that name already exists.")
        if name in self.remotes or self.refs.has_namespace(name):
            raise DomainError("A remote with that name already exists.")
        try:
            self.refs.write_branch(name, self.head_digest)
        except ValueError:
            raise DomainError("Invalid branch name.") from None

    def rm_branch(self, name: str) -> None:
        """Delete the pointer ``name``; commits are left alone."""
        if not self.refs.has_branch(name):
            raise DomainError("A branch with that name does not exist.")
        if name == self.head_branch:
            raise DomainError("Cannot remove the current branch.")
        self.refs.delete_branch(name)

    # ------------------------------------------------------------------
    # Checkout / reset
    # ------------------------------------------------------------------

    def checkout_file(self, path: str) -> None:
        """Restore ``path`` from HEAD."""
        self.tree.restore_file(self.tree.normalize(path), self.head_commit())

    def checkout_file_at(self, commit_id: str, path: str) -> None:
        """Restore ``path`` from the commit named by ``commit_id``."""
        target = self.resolve_commit(commit_id)
        self.tree.restore_file(self.tree.normalize(path), target)

    def switch_branch(self, name: str) -> None:
        """Check out branch ``name`` and make it HEAD."""
        digest = self.refs.get_branch(name)
        if digest is None:
            raise DomainError("No such branch exists.")
        if name == self.head_branch:
            raise DomainError("No need to checkout the current branch.")
        self.tree.switch_to(self.store.get_commit(digest), self.head_commit(), self.staging)
        self._finish_switch()
        self.refs.set_head(name)
        logger.info("Switched to branch %s", name)

    def reset(self, commit_id: str) -> None:
        """Check out an arbitrary commit and move the current branch to it."""
        target = self.resolve_commit(commit_id)
        self.tree.switch_to(target, self.head_commit(), self.staging)
        self._finish_switch()
        self.refs.write_branch(self.head_branch, target.digest)
        logger.info("Reset %s to %s", self.head_branch, target.short_id)

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the current branch."""
        if not self.staging.is_empty():
            raise DomainError("You have uncommitted changes.")
        other_digest = self.refs.get_branch(branch)
        if other_digest is None:
            raise DomainError("A branch with that name does not exist.")
        if branch == self.head_branch:
            raise DomainError("Cannot merge a branch with itself.")

        current = self.head_commit()
        other = self.store.get_commit(other_digest)
        self.tree.check_untracked(current, self.staging, set(other.blobs))
        split = self.graph.common_ancestor(current.digest, other.digest)

        if split == other.digest:
            return MergeResult(outcome=MergeOutcome.ALREADY_ANCESTOR)
        if split == current.digest:
            self.tree.switch_to(other, current, self.staging)
            self._finish_switch()
            self.refs.write_branch(self.head_branch, other.digest)
            logger.info("Fast-forwarded %s to %s", self.head_branch, other.short_id)
            return MergeResult(
                outcome=MergeOutcome.FAST_FORWARD, commit_digest=other.digest
            )

        resolutions = classify(self.store.get_commit(split), current, other)
        engine = MergeEngine(self.store, self.tree, self.config.conflict_head_label)
        conflicts = engine.apply(resolutions, other, self.staging)
        merged = self._make_commit(
            f"Merged {branch} into {self.head_branch}.", parent2=other.digest
        )
        if conflicts:
            logger.info("Merge of %s produced %d conflicts", branch, len(conflicts))
        return MergeResult(
            outcome=MergeOutcome.MERGED,
            commit_digest=merged.digest,
            conflicts=conflicts,
        )

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------

    def add_remote(self, name: str, location: str) -> None:
        if "/" in name:
            raise DomainError("Remote names cannot contain '/'.")
        if not is_valid_ref_name(name):
            raise DomainError("Invalid remote name.")
        if name in self.remotes:
            raise DomainError("A remote with that name already exists.")
        if self.refs.has_branch(name):
            raise DomainError("A branch with that name already exists.")
        self.remotes.add(name, location)

    def rm_remote(self, name: str) -> None:
        if name not in self.remotes:
            raise DomainError("A remote with that name does not exist.")
        self.remotes.remove(name)
        self.refs.drop_remote_namespace(name)

    def _endpoint(self, name: str) -> RemoteEndpoint:
        location = self.remotes.get(name)
        if location is None:
            raise DomainError("A remote with that name does not exist.")
        path = Path(location).expanduser()
        if not path.is_absolute():
            path = self.root / path
        return RemoteEndpoint.open(str(path), self.config.repo_dir_name)

    def fetch(self, remote: str, branch: str) -> TransferReport:
        endpoint = self._endpoint(remote)
        if self.refs.has_branch(remote):
            raise DomainError("A branch with that name already exists.")
        return remote_sync.fetch(self.store, self.refs, remote, endpoint, branch)

    def push(self, remote: str, branch: str) -> TransferReport:
        return remote_sync.push(
            self.store, self.head_digest, self._endpoint(remote), branch
        )

    def pull(self, remote: str, branch: str) -> MergeResult:
        self.fetch(remote, branch)
        return self.merge(f"{remote}/{branch}")
