"""Cairn: a local-first, content-addressed version-control engine.

Tracks snapshots of a file tree as immutable, SHA-256 addressed commits,
supports branching and three-way merging, and replicates history between
local repositories acting as remotes.
"""

__version__ = "0.1.0"
__description__ = "Local-first, content-addressed version control"

from cairn.core.repository import Repository
from cairn.cli.app import app as cli

__all__ = ["Repository", "cli", "__version__"]
