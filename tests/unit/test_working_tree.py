"""Tests for the WorkingTree synchronizer: restore, switch, untracked detection."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cairn.core.errors import DomainError, ObjectNotFoundError
from cairn.core.object_store import MemoryObjectStore
from cairn.core.staging import StagingArea
from cairn.core.working_tree import UNTRACKED_IN_THE_WAY, WorkingTree
from cairn.models.commit import Commit


@pytest.fixture
def tree(work_dir: Path, memory_store: MemoryObjectStore) -> WorkingTree:
    return WorkingTree(work_dir, memory_store)


def snapshot(store: MemoryObjectStore, files: dict[str, bytes], sequence: int = 1) -> Commit:
    blobs = {path: store.put(data) for path, data in files.items()}
    return Commit.create(blobs=blobs, message="snap", parent=None, sequence=sequence)


class TestFiles:
    def test_lists_nested_files(self, tree: WorkingTree, work_dir: Path, write: Callable[..., Path]):
        write(work_dir, "a.txt", "a")
        write(work_dir, "src/b.txt", "b")
        assert tree.files() == {"a.txt", "src/b.txt"}

    def test_ignores_repository_directory(self, tree: WorkingTree, work_dir: Path, write: Callable[..., Path]):
        write(work_dir, ".cairn/HEAD", "master")
        write(work_dir, "a.txt", "a")
        assert tree.files() == {"a.txt"}

    def test_normalize(self, tree: WorkingTree, work_dir: Path):
        assert tree.normalize("src/./b.txt") == "src/b.txt"
        assert tree.normalize(work_dir / "a.txt") == "a.txt"

    @pytest.mark.parametrize("bad", ["../escape.txt", ".cairn/HEAD", ""])
    def test_normalize_rejects_outside_paths(self, tree: WorkingTree, bad: str):
        with pytest.raises(DomainError, match="File does not exist."):
            tree.normalize(bad)

    def test_delete_prunes_empty_directories(self, tree: WorkingTree, work_dir: Path, write: Callable[..., Path]):
        write(work_dir, "deep/nested/f.txt", "x")
        tree.delete("deep/nested/f.txt")
        assert not (work_dir / "deep").exists()
        assert work_dir.exists()


class TestRestoreFile:
    def test_restore_overwrites(self, tree: WorkingTree, memory_store: MemoryObjectStore,
                                work_dir: Path, write: Callable[..., Path]):
        commit = snapshot(memory_store, {"f.txt": b"committed"})
        write(work_dir, "f.txt", "local edit")
        tree.restore_file("f.txt", commit)
        assert (work_dir / "f.txt").read_bytes() == b"committed"

    def test_restore_missing_path(self, tree: WorkingTree, memory_store: MemoryObjectStore):
        commit = snapshot(memory_store, {"f.txt": b"x"})
        with pytest.raises(DomainError, match="File does not exist in that commit."):
            tree.restore_file("g.txt", commit)


class TestSwitchTo:
    def test_switch_adds_overwrites_and_deletes(self, tree: WorkingTree, memory_store: MemoryObjectStore,
                                                 work_dir: Path, write: Callable[..., Path]):
        previous = snapshot(memory_store, {"keep.txt": b"old", "gone.txt": b"bye"}, 1)
        target = snapshot(memory_store, {"keep.txt": b"new", "added.txt": b"hi"}, 2)
        write(work_dir, "keep.txt", "old")
        write(work_dir, "gone.txt", "bye")

        tree.switch_to(target, previous, StagingArea())

        assert tree.files() == {"keep.txt", "added.txt"}
        assert (work_dir / "keep.txt").read_bytes() == b"new"

    def test_untracked_conflict_aborts_without_changes(self, tree: WorkingTree,
                                                        memory_store: MemoryObjectStore,
                                                        work_dir: Path, write: Callable[..., Path]):
        previous = snapshot(memory_store, {"gone.txt": b"bye"}, 1)
        target = snapshot(memory_store, {"clash.txt": b"theirs"}, 2)
        write(work_dir, "gone.txt", "bye")
        write(work_dir, "clash.txt", "mine, untracked")

        with pytest.raises(DomainError, match="untracked file in the way"):
            tree.switch_to(target, previous, StagingArea())

        assert (work_dir / "clash.txt").read_text() == "mine, untracked"
        assert (work_dir / "gone.txt").exists()

    def test_untracked_file_not_in_target_is_left_alone(self, tree: WorkingTree,
                                                         memory_store: MemoryObjectStore,
                                                         work_dir: Path, write: Callable[..., Path]):
        previous = snapshot(memory_store, {}, 1)
        target = snapshot(memory_store, {"a.txt": b"a"}, 2)
        write(work_dir, "notes.txt", "scratch")
        tree.switch_to(target, previous, StagingArea())
        assert (work_dir / "notes.txt").read_text() == "scratch"

    def test_missing_blob_aborts_before_mutation(self, tree: WorkingTree, memory_store: MemoryObjectStore,
                                                  work_dir: Path, write: Callable[..., Path]):
        previous = snapshot(memory_store, {"gone.txt": b"bye"}, 1)
        target = Commit.create(blobs={"x.txt": "0" * 64}, message="broken", parent=None, sequence=2)
        write(work_dir, "gone.txt", "bye")
        with pytest.raises(ObjectNotFoundError):
            tree.switch_to(target, previous, StagingArea())
        assert (work_dir / "gone.txt").exists()

    def test_untracked_files_sorted_and_exclude_staged(self, tree: WorkingTree,
                                                        memory_store: MemoryObjectStore,
                                                        work_dir: Path, write: Callable[..., Path]):
        head = snapshot(memory_store, {"tracked.txt": b"t"})
        for name in ["z.txt", "b.txt", "tracked.txt", "staged.txt"]:
            write(work_dir, name, name)
        staging = StagingArea()
        staging.stage_add("staged.txt", "0" * 64, None)
        assert tree.untracked_files(head, staging) == ["b.txt", "z.txt"]

    def test_message_text(self):
        assert UNTRACKED_IN_THE_WAY == (
            "There is an untracked file in the way; delete it, or add and commit it first."
        )
