"""Cairn data models: Pydantic v2, frozen unless they model mutable state."""

from cairn.models.commit import Commit
from cairn.models.merge import MergeAction, MergeOutcome, MergeResult, PathResolution
from cairn.models.status import StatusReport

__all__ = [
    # commits
    "Commit",
    # merge
    "MergeAction",
    "MergeOutcome",
    "MergeResult",
    "PathResolution",
    # status
    "StatusReport",
]
