"""Canonical hashing helpers for blobs and commits.

Commits are hashed over canonical JSON so the digest is independent of
dict ordering or whitespace in the stored file.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize ``obj`` so equal values always yield identical bytes.

    Keys are sorted, separators carry no whitespace and non-ASCII text is
    escaped, so a commit hashes the same no matter how it was built.
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_commit_digest(commit_dict: dict[str, Any]) -> str:
    """SHA-256 of a commit (excluding the digest field itself)."""
    d = {k: v for k, v in commit_dict.items() if k != "digest"}
    return sha256_hex(canonical_json_bytes(d))
