"""Remote sync: fetch and push between two object stores.

A remote is another cairn repository reachable through a location
identifier. Transfers are set differences by digest: an object the
receiving side already holds is never copied again. Commits travel
verbatim; since each one already names its real parents, extending a
remote branch never requires rewriting (and re-hashing) a commit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cairn.core.commit_graph import CommitGraph
from cairn.core.errors import CorruptObjectError, DomainError
from cairn.core.object_store import FileObjectStore, ObjectStore
from cairn.core.refs import RefStore, is_valid_ref_name

logger = logging.getLogger(__name__)


class TransferReport(BaseModel):
    """How many objects a fetch or push actually copied."""

    model_config = ConfigDict(frozen=True)

    branch: str
    tip: str
    commits: int = 0
    blobs: int = 0


class RemoteEndpoint:
    """Object store and branch pointers of a remote repository."""

    def __init__(self, store: ObjectStore, refs: RefStore) -> None:
        self.store = store
        self.refs = refs

    @classmethod
    def open(cls, location: str, repo_dir_name: str = ".cairn") -> RemoteEndpoint:
        """Open the repository at ``location``.

        ``location`` may be the remote's working directory or its
        repository directory.
        """
        path = Path(location).expanduser()
        if (path / repo_dir_name).is_dir():
            path = path / repo_dir_name
        if not (path / "objects").is_dir() or not (path / "branches").is_dir():
            raise DomainError("Remote directory not found.")
        return cls(FileObjectStore(path / "objects"), RefStore(path))


def copy_blob(source: ObjectStore, target: ObjectStore, digest: str) -> None:
    stored = target.put(source.get(digest))
    if stored != digest:
        raise CorruptObjectError(f"Blob {digest} re-hashed to {stored} during transfer")


def fetch(
    local_store: ObjectStore,
    local_refs: RefStore,
    remote_name: str,
    endpoint: RemoteEndpoint,
    branch: str,
) -> TransferReport:
    """Copy missing objects from the remote and update ``remote/branch``."""
    if "/" in branch or not is_valid_ref_name(branch):
        raise DomainError("That remote does not have that branch.")
    tip = endpoint.refs.get_branch(branch)
    if tip is None:
        raise DomainError("That remote does not have that branch.")

    blobs = sorted(endpoint.store.blob_digests() - local_store.blob_digests())
    for digest in blobs:
        copy_blob(endpoint.store, local_store, digest)

    commits = sorted(endpoint.store.commit_digests() - local_store.commit_digests())
    for digest in commits:
        local_store.put_commit(endpoint.store.get_commit(digest))

    local_refs.write_branch(f"{remote_name}/{branch}", tip)
    logger.info(
        "Fetched %s/%s at %s (%d commits, %d blobs)",
        remote_name, branch, tip[:12], len(commits), len(blobs),
    )
    return TransferReport(branch=f"{remote_name}/{branch}", tip=tip,
                          commits=len(commits), blobs=len(blobs))


def push(
    local_store: ObjectStore,
    local_tip: str,
    endpoint: RemoteEndpoint,
    branch: str,
) -> TransferReport:
    """Extend the remote ``branch`` to ``local_tip``.

    The remote tip must already be part of the local history; otherwise
    the caller has to fetch and merge first.
    """
    if "/" in branch or not is_valid_ref_name(branch) or endpoint.refs.has_namespace(branch):
        raise DomainError("Invalid branch name.")
    graph = CommitGraph(local_store)
    remote_tip = endpoint.refs.get_branch(branch)
    if remote_tip is not None and not graph.is_ancestor(remote_tip, local_tip):
        raise DomainError("Please pull down remote changes before pushing.")
    ancestry = graph.ancestors(local_tip)

    # Oldest first, so the remote never holds a commit whose parent it lacks.
    missing = [
        local_store.get_commit(d)
        for d in ancestry
        if not endpoint.store.has_commit(d)
    ]
    missing.sort(key=lambda c: (c.sequence, c.timestamp))

    blob_count = 0
    for commit in missing:
        for blob in commit.blobs.values():
            if not endpoint.store.has_blob(blob):
                copy_blob(local_store, endpoint.store, blob)
                blob_count += 1
        endpoint.store.put_commit(commit)

    endpoint.refs.write_branch(branch, local_tip)
    logger.info(
        "Pushed %s to %s (%d commits, %d blobs)",
        local_tip[:12], branch, len(missing), blob_count,
    )
    return TransferReport(branch=branch, tip=local_tip,
                          commits=len(missing), blobs=blob_count)
