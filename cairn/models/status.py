"""Working-tree status report."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StatusReport(BaseModel):
    """The five sections printed by ``cairn status``, each already sorted."""

    model_config = ConfigDict(frozen=True)

    current_branch: str
    branches: list[str] = []
    staged: list[str] = []
    removed: list[str] = []
    modified: list[str] = []  # "path (modified)" / "path (deleted)"
    untracked: list[str] = []
