"""Shared test fixtures for cairn."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cairn.config import CairnConfig
from cairn.core.object_store import FileObjectStore, MemoryObjectStore
from cairn.core.repository import Repository


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def cfg() -> CairnConfig:
    """Default settings, isolated from any CAIRN_* variables or .env file."""
    return CairnConfig(_env_file=None, repo_dir_name=".cairn", default_branch="master",
                       initial_message="initial commit", conflict_head_label="HEAD")


@pytest.fixture
def file_store(tmp_dir: Path) -> FileObjectStore:
    """Provide a fresh on-disk object store in a temp directory."""
    return FileObjectStore(tmp_dir / "objects")


@pytest.fixture
def memory_store() -> MemoryObjectStore:
    """Provide a fresh in-memory object store."""
    return MemoryObjectStore()


@pytest.fixture
def work_dir(tmp_dir: Path) -> Path:
    """An empty working-tree root."""
    root = tmp_dir / "work"
    root.mkdir()
    return root


@pytest.fixture
def repo(work_dir: Path, cfg: CairnConfig) -> Repository:
    """Provide a freshly initialized repository."""
    return Repository.init(work_dir, config=cfg)


@pytest.fixture
def write() -> Callable[..., Path]:
    """Factory fixture: write text into a file under a root directory."""

    def _write(root: Path, path: str, content: str) -> Path:
        target = root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


@pytest.fixture
def commit_files(write: Callable[..., Path]) -> Callable[..., str]:
    """Factory fixture: write, stage and commit files; returns the commit digest."""

    def _commit(repo: Repository, message: str, files: dict[str, str]) -> str:
        for path, content in files.items():
            write(repo.root, path, content)
            repo.add(path)
        return repo.commit(message).digest

    return _commit
