"""Merge outcome models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MergeAction(str, Enum):
    """What the merge engine decided for one path."""

    KEEP = "keep"
    TAKE_OTHER = "take_other"
    DELETE = "delete"
    CONFLICT = "conflict"


class MergeOutcome(str, Enum):
    """How a merge request was resolved as a whole."""

    MERGED = "merged"
    FAST_FORWARD = "fast_forward"
    ALREADY_ANCESTOR = "already_ancestor"


class PathResolution(BaseModel):
    """Classification of a single path in a three-way merge."""

    model_config = ConfigDict(frozen=True)

    path: str
    action: MergeAction
    base: str | None = None
    current: str | None = None
    other: str | None = None


class MergeResult(BaseModel):
    """Result returned by ``Repository.merge``."""

    model_config = ConfigDict(frozen=True)

    outcome: MergeOutcome
    commit_digest: str | None = None
    conflicts: list[str] = []

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)
