"""``cairn init`` / ``add`` / ``rm`` / ``commit``: building up a commit."""

from __future__ import annotations

import typer

from cairn.cli.session import open_repo, repo_root, reporting
from cairn.core.repository import Repository


def init_cmd(ctx: typer.Context) -> None:
    """Create an empty repository with a root commit on the default branch."""
    with reporting():
        Repository.init(repo_root(ctx))


def add_cmd(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to stage."),
) -> None:
    """Stage the current content of a file."""
    with reporting():
        open_repo(ctx).add(path)


def rm_cmd(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to unstage or remove."),
) -> None:
    """Unstage a file, and stage its removal if the current commit tracks it."""
    with reporting():
        open_repo(ctx).rm(path)


def commit_cmd(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Commit message."),
) -> None:
    """Record the staged changes as a new commit."""
    with reporting():
        open_repo(ctx).commit(message)
