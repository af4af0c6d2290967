"""Three-way merge over whole-file content.

Each path in the union of the current and given snapshots is classified by
comparing its blob digest in the split point, the current commit and the
given commit (``None`` means absent):

- current == given                 -> keep (nothing to do)
- base == current, given changed   -> take given (or delete if given removed it)
- base == given, current changed   -> keep current
- all three differ                 -> conflict, write a marker file
"""

from __future__ import annotations

import logging

from cairn.core.object_store import ObjectStore
from cairn.core.staging import StagingArea
from cairn.core.working_tree import WorkingTree
from cairn.models.commit import Commit
from cairn.models.merge import MergeAction, PathResolution

logger = logging.getLogger(__name__)


def classify_path(
    path: str, base: str | None, current: str | None, other: str | None
) -> PathResolution:
    """Decide what a merge does with one path."""
    if current == other or base == other:
        action = MergeAction.KEEP
    elif base == current:
        action = MergeAction.DELETE if other is None else MergeAction.TAKE_OTHER
    else:
        action = MergeAction.CONFLICT
    return PathResolution(
        path=path, action=action, base=base, current=current, other=other
    )


def classify(base: Commit, current: Commit, other: Commit) -> list[PathResolution]:
    """Classify every path of ``current`` and ``other``, sorted by path."""
    paths = sorted(set(current.blobs) | set(other.blobs))
    return [
        classify_path(
            path,
            base.blobs.get(path),
            current.blobs.get(path),
            other.blobs.get(path),
        )
        for path in paths
    ]


class MergeEngine:
    """Applies merge resolutions to the working tree and staging area.

    Parameters
    ----------
    store:
        Object store holding the blobs of both sides.
    tree:
        The working tree to write results into.
    head_label:
        Label after the opening conflict marker.
    """

    def __init__(self, store: ObjectStore, tree: WorkingTree, head_label: str = "HEAD") -> None:
        self._store = store
        self._tree = tree
        self._head_label = head_label

    def conflict_content(self, current: str | None, other: str | None) -> bytes:
        """Both versions of a file delimited by conflict markers."""
        ours = self._store.get(current) if current else b""
        theirs = self._store.get(other) if other else b""
        return (
            f"<<<<<<< {self._head_label}\n".encode("utf-8")
            + ours
            + b"=======\n"
            + theirs
            + b">>>>>>>\n"
        )

    def apply(
        self,
        resolutions: list[PathResolution],
        other: Commit,
        staging: StagingArea,
    ) -> list[str]:
        """Write each resolution to disk and stage it.

        Returns the conflicted paths.
        """
        conflicts: list[str] = []
        for res in resolutions:
            if res.action is MergeAction.KEEP:
                continue
            if res.action is MergeAction.TAKE_OTHER:
                self._tree.restore_file(res.path, other)
                staging.stage_add(res.path, res.other, res.current)
            elif res.action is MergeAction.DELETE:
                self._tree.delete(res.path)
                staging.stage_remove(res.path, res.current)
            else:
                content = self.conflict_content(res.current, res.other)
                digest = self._store.put(content)
                self._tree.write(res.path, content)
                staging.stage_add(res.path, digest, res.current)
                conflicts.append(res.path)
            logger.debug("Merge %s: %s", res.action.value, res.path)
        return conflicts
