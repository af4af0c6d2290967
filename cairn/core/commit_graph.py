"""Commit graph queries: history walks, ordering, and split-point search.

The graph is only ever read through a "parents of" capability, so the
algorithms here do not care how commits are stored.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator

from cairn.core.errors import DomainError
from cairn.core.object_store import ObjectStore
from cairn.models.commit import Commit

logger = logging.getLogger(__name__)

ParentsOf = Callable[[str], list[str]]


def ranked_ancestors(start: str, parents_of: ParentsOf) -> dict[str, int]:
    """Every commit reachable from ``start`` (inclusive) -> minimum hop count.

    Breadth-first over both parent edges, so the first time a commit is
    reached is along a shortest path. Dict order is BFS discovery order.
    """
    distances: dict[str, int] = {start: 0}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for parent in parents_of(node):
            if parent not in distances:
                distances[parent] = distances[node] + 1
                queue.append(parent)
    return distances


def split_point(a: str, b: str, parents_of: ParentsOf) -> str | None:
    """Best common ancestor of ``a`` and ``b``.

    Picks the common ancestor with the lowest combined distance from both
    tips; ties go to the one closer to ``a``, then to the one ``a``'s walk
    discovers first. Returns None if the histories are disjoint.
    """
    from_a = ranked_ancestors(a, parents_of)
    from_b = ranked_ancestors(b, parents_of)
    best: str | None = None
    best_rank: tuple[int, int] | None = None
    for node, dist_a in from_a.items():
        dist_b = from_b.get(node)
        if dist_b is None:
            continue
        rank = (dist_a + dist_b, dist_a)
        if best_rank is None or rank < best_rank:
            best, best_rank = node, rank
    return best


class History:
    """First-parent history from a starting commit, newest first.

    Iterating reloads from the store each time, so the sequence can be
    walked any number of times.
    """

    def __init__(self, store: ObjectStore, start: str) -> None:
        self._store = store
        self._start = start

    def __iter__(self) -> Iterator[Commit]:
        digest: str | None = self._start
        while digest is not None:
            commit = self._store.get_commit(digest)
            yield commit
            digest = commit.parent


class CommitGraph:
    """Read-only view of the commit DAG held by an object store."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    def parents_of(self, digest: str) -> list[str]:
        return self._store.get_commit(digest).parents

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def log(self, start: str) -> History:
        """First-parent history from ``start`` back to the root."""
        return History(self._store, start)

    def global_log(self) -> list[Commit]:
        """Every commit in the store in creation order."""
        return sorted(
            self._store.iter_commits(),
            key=lambda c: (c.sequence, c.timestamp, c.digest),
        )

    def find_by_message(self, text: str) -> list[Commit]:
        """Commits whose message equals ``text`` exactly, in creation order."""
        matches = [c for c in self.global_log() if c.message == text]
        if not matches:
            raise DomainError("Found no commit with that message.")
        return matches

    def max_sequence(self) -> int:
        return max((c.sequence for c in self._store.iter_commits()), default=-1)

    # ------------------------------------------------------------------
    # Ancestry
    # ------------------------------------------------------------------

    def ancestors(self, start: str) -> dict[str, int]:
        return ranked_ancestors(start, self.parents_of)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True if ``ancestor`` is reachable from ``descendant`` (or equal)."""
        return ancestor in self.ancestors(descendant)

    def common_ancestor(self, a: str, b: str) -> str:
        """Split point used as the base of a three-way merge."""
        split = split_point(a, b, self.parents_of)
        if split is None:
            raise DomainError("The given commits share no history.")
        logger.debug("Split point of %s and %s is %s", a[:12], b[:12], split[:12])
        return split
