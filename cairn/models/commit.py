"""Commit model: immutable snapshot plus parent linkage.

A commit's ``digest`` is the SHA-256 of the canonical JSON of every other
field. It is computed once by :meth:`Commit.create` and sealed into a frozen
model, so it can never drift from the content it identifies.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from cairn.core.hasher import compute_commit_digest


class Commit(BaseModel):
    """A single node of the commit graph.

    Parameters
    ----------
    blobs:
        Mapping of tracked path -> blob digest.
    message:
        Free-text commit message (non-blank for user commits).
    parent:
        Digest of the first parent, ``None`` for the root commit.
    parent2:
        Digest of the second parent, present only for merge commits.
    timestamp:
        Creation time (UTC), captured once at construction.
    sequence:
        Monotonic creation counter; gives a total order over commits.
    digest:
        SHA-256 over all fields above. Empty only on an unsealed draft.
    """

    model_config = ConfigDict(frozen=True)

    blobs: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    message: str
    parent: str | None = None
    parent2: str | None = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    sequence: int = 0
    digest: str = ""

    @field_validator("blobs")
    @classmethod
    def freeze_blobs(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Store the snapshot read-only so it cannot drift from the digest."""
        return MappingProxyType(dict(v))

    @field_serializer("blobs")
    def dump_blobs(self, blobs: Mapping[str, str]) -> dict[str, str]:
        return dict(blobs)

    @classmethod
    def create(
        cls,
        *,
        blobs: Mapping[str, str],
        message: str,
        parent: str | None,
        sequence: int,
        parent2: str | None = None,
        timestamp: datetime | None = None,
    ) -> Commit:
        """Build a commit and seal it with its content digest."""
        draft = cls(
            blobs=dict(sorted(blobs.items())),
            message=message,
            parent=parent,
            parent2=parent2,
            timestamp=timestamp or datetime.now(timezone.utc),
            sequence=sequence,
        )
        return draft.model_copy(
            update={"digest": compute_commit_digest(draft.to_payload())}
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict of this commit, digest included."""
        return self.model_dump(mode="json")

    def compute_digest(self) -> str:
        """Recompute the digest from the current field values."""
        return compute_commit_digest(self.to_payload())

    @property
    def is_merge(self) -> bool:
        return self.parent2 is not None

    @property
    def parents(self) -> list[str]:
        """Parent digests, first parent first."""
        return [p for p in (self.parent, self.parent2) if p is not None]

    @property
    def short_id(self) -> str:
        return self.digest[:7]
