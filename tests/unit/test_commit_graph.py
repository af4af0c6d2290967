"""Tests for the CommitGraph: history walks, ordering, split-point search."""

from __future__ import annotations

import pytest

from cairn.core.commit_graph import CommitGraph, ranked_ancestors, split_point
from cairn.core.errors import DomainError
from cairn.core.object_store import MemoryObjectStore
from cairn.models.commit import Commit


class GraphBuilder:
    """Builds commits by label into a memory store."""

    def __init__(self, store: MemoryObjectStore) -> None:
        self.store = store
        self.ids: dict[str, str] = {}
        self._seq = 0

    def add(self, label: str, parent: str | None = None, parent2: str | None = None,
            message: str | None = None) -> str:
        commit = Commit.create(
            blobs={},
            message=message or label,
            parent=self.ids[parent] if parent else None,
            parent2=self.ids[parent2] if parent2 else None,
            sequence=self._seq,
        )
        self._seq += 1
        self.store.put_commit(commit)
        self.ids[label] = commit.digest
        return commit.digest


@pytest.fixture
def builder(memory_store: MemoryObjectStore) -> GraphBuilder:
    return GraphBuilder(memory_store)


@pytest.fixture
def graph(memory_store: MemoryObjectStore) -> CommitGraph:
    return CommitGraph(memory_store)


class TestLog:
    def test_root_only(self, builder: GraphBuilder, graph: CommitGraph):
        root = builder.add("R")
        commits = list(graph.log(root))
        assert [c.digest for c in commits] == [root]
        assert commits[0].parent is None

    def test_first_parent_newest_first(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        builder.add("A1", "R")
        builder.add("B1", "R")
        tip = builder.add("M", "A1", "B1")
        messages = [c.message for c in graph.log(tip)]
        assert messages == ["M", "A1", "R"]

    def test_restartable(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        tip = builder.add("C1", "R")
        history = graph.log(tip)
        assert [c.digest for c in history] == [c.digest for c in history]


class TestOrdering:
    def test_global_log_in_creation_order(self, builder: GraphBuilder, graph: CommitGraph):
        for label, parent in [("R", None), ("A", "R"), ("B", "R"), ("C", "A")]:
            builder.add(label, parent)
        assert [c.message for c in graph.global_log()] == ["R", "A", "B", "C"]

    def test_find_by_message(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        first = builder.add("X", "R", message="same")
        second = builder.add("Y", "X", message="same")
        assert [c.digest for c in graph.find_by_message("same")] == [first, second]

    def test_find_by_message_none(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        with pytest.raises(DomainError, match="Found no commit with that message."):
            graph.find_by_message("missing")

    def test_max_sequence(self, builder: GraphBuilder, graph: CommitGraph):
        assert graph.max_sequence() == -1
        builder.add("R")
        builder.add("A", "R")
        assert graph.max_sequence() == 1


class TestAncestry:
    def test_ranked_ancestors_minimum_distance(self):
        parents = {"M": ["A", "B"], "A": ["R"], "B": ["A"], "R": []}
        ranks = ranked_ancestors("M", parents.__getitem__)
        assert ranks == {"M": 0, "A": 1, "B": 1, "R": 2}

    def test_is_ancestor(self, builder: GraphBuilder, graph: CommitGraph):
        root = builder.add("R")
        a = builder.add("A", "R")
        b = builder.add("B", "R")
        assert graph.is_ancestor(root, a)
        assert graph.is_ancestor(a, a)
        assert not graph.is_ancestor(a, b)

    def test_simple_fork(self, builder: GraphBuilder, graph: CommitGraph):
        root = builder.add("R")
        a = builder.add("A", "R")
        b = builder.add("B", "R")
        assert graph.common_ancestor(a, b) == root

    def test_one_side_is_ancestor(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        a = builder.add("A", "R")
        b = builder.add("B", "A")
        assert graph.common_ancestor(b, a) == a
        assert graph.common_ancestor(a, b) == a

    def test_uses_second_parent_after_earlier_merge(self, builder: GraphBuilder, graph: CommitGraph):
        builder.add("R")
        builder.add("M1", "R")
        b1 = builder.add("B1", "R")
        builder.add("M2", "M1", "B1")
        m3 = builder.add("M3", "M2")
        b2 = builder.add("B2", "B1")
        assert graph.common_ancestor(m3, b2) == b1
        assert graph.common_ancestor(b2, m3) == b1

    def test_criss_cross_picks_single_best_candidate(self, builder: GraphBuilder, graph: CommitGraph):
        root = builder.add("R")
        a1 = builder.add("A1", "R")
        b1 = builder.add("B1", "R")
        builder.add("A2", "A1", "B1")
        builder.add("B2", "B1", "A1")
        a3 = builder.add("A3", "A2")
        b3 = builder.add("B3", "B2")
        split = graph.common_ancestor(a3, b3)
        assert split in (a1, b1)
        assert split != root
        # Equal rank: the candidate reached first from the first tip wins.
        assert split == a1

    def test_tie_prefers_closer_to_first_tip(self):
        # X is 1 hop from a and 3 from b; Y is 3 hops from a and 1 from b.
        parents = {
            "a": ["X", "p"], "p": ["q"], "q": ["Y"],
            "b": ["Y", "r"], "r": ["s"], "s": ["X"],
            "X": [], "Y": [],
        }
        assert split_point("a", "b", parents.__getitem__) == "X"
        assert split_point("b", "a", parents.__getitem__) == "Y"

    def test_disjoint_histories(self, builder: GraphBuilder, graph: CommitGraph):
        a = builder.add("A")
        b = builder.add("B", message="other root")
        assert split_point(a, b, graph.parents_of) is None
        with pytest.raises(DomainError):
            graph.common_ancestor(a, b)
