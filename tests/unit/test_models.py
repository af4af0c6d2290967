"""Tests for the Commit model: sealing, immutability, serialization."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from cairn.core.hasher import canonical_json_bytes, compute_commit_digest, sha256_hex
from cairn.models.commit import Commit
from cairn.models.merge import MergeOutcome, MergeResult


def _commit(**overrides) -> Commit:
    fields = {
        "blobs": {"b.txt": "2" * 64, "a.txt": "1" * 64},
        "message": "a commit",
        "parent": "f" * 64,
        "sequence": 3,
        "timestamp": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Commit.create(**fields)


class TestCommitSealing:
    def test_digest_matches_content(self):
        commit = _commit()
        payload = commit.model_dump(mode="json")
        payload.pop("digest")
        assert commit.digest == sha256_hex(canonical_json_bytes(payload))
        assert commit.digest == commit.compute_digest()

    def test_digest_excludes_itself(self):
        commit = _commit()
        assert compute_commit_digest(commit.to_payload()) == commit.digest

    def test_same_content_same_digest(self):
        assert _commit().digest == _commit().digest

    @pytest.mark.parametrize(
        "overrides",
        [
            {"message": "other message"},
            {"parent": "e" * 64},
            {"parent2": "d" * 64},
            {"sequence": 4},
            {"blobs": {"a.txt": "1" * 64}},
            {"timestamp": datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc)},
        ],
    )
    def test_every_field_feeds_the_digest(self, overrides):
        assert _commit(**overrides).digest != _commit().digest

    def test_blobs_are_sorted(self):
        assert list(_commit().blobs) == ["a.txt", "b.txt"]

    def test_frozen(self):
        commit = _commit()
        with pytest.raises(ValidationError):
            commit.parent = "0" * 64

    def test_blobs_read_only(self):
        commit = _commit()
        with pytest.raises(TypeError):
            commit.blobs["a.txt"] = "0" * 64  # type: ignore[index]
        assert commit.compute_digest() == commit.digest

    def test_blobs_serialize_as_plain_dict(self):
        payload = _commit().to_payload()
        assert payload["blobs"] == {"a.txt": "1" * 64, "b.txt": "2" * 64}
        assert type(payload["blobs"]) is dict

    def test_round_trip_keeps_digest(self):
        commit = _commit()
        restored = Commit.model_validate(json.loads(canonical_json_bytes(commit.to_payload())))
        assert restored == commit
        assert restored.compute_digest() == commit.digest


class TestCommitProperties:
    def test_root_commit(self):
        root = _commit(parent=None)
        assert root.parents == []
        assert root.is_merge is False

    def test_merge_commit(self):
        merge = _commit(parent2="d" * 64)
        assert merge.is_merge is True
        assert merge.parents == ["f" * 64, "d" * 64]

    def test_short_id(self):
        commit = _commit()
        assert commit.short_id == commit.digest[:7]


class TestMergeResult:
    def test_has_conflicts(self):
        assert MergeResult(outcome=MergeOutcome.MERGED, conflicts=["f"]).has_conflicts
        assert not MergeResult(outcome=MergeOutcome.FAST_FORWARD).has_conflicts
