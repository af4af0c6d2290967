"""``cairn branch`` / ``rm-branch`` / ``checkout`` / ``reset`` / ``merge``."""

from __future__ import annotations

from typing import List, Optional

import typer

from cairn.cli.renderer import print_merge_result
from cairn.cli.session import open_repo, reporting
from cairn.core.errors import UsageError
from cairn.core.repository import Repository


def branch_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the new branch."),
) -> None:
    """Create a branch pointing at the current commit."""
    with reporting():
        open_repo(ctx).branch(name)


def rm_branch_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Branch to delete."),
) -> None:
    """Delete a branch pointer (its commits are kept)."""
    with reporting():
        open_repo(ctx).rm_branch(name)


def dispatch_checkout(repo: Repository, args: list[str]) -> None:
    """Map the three checkout shapes onto their repository operations.

    - ``-- FILE``            restore FILE from the current commit
    - ``COMMIT_ID -- FILE``  restore FILE from COMMIT_ID
    - ``BRANCH``             switch to BRANCH
    """
    if len(args) == 2 and args[0] == "--":
        repo.checkout_file(args[1])
    elif len(args) == 3 and args[1] == "--":
        repo.checkout_file_at(args[0], args[2])
    elif len(args) == 1 and args[0] != "--":
        repo.switch_branch(args[0])
    else:
        raise UsageError()


def checkout_cmd(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(
        None, help="[-- FILE] | [COMMIT_ID -- FILE] | [BRANCH]"
    ),
) -> None:
    """Restore a file from HEAD or a commit, or switch branches."""
    raw = ctx.meta.get("raw_args", args or [])
    with reporting():
        dispatch_checkout(open_repo(ctx), list(raw))


def reset_cmd(
    ctx: typer.Context,
    commit_id: str = typer.Argument(..., help="Commit to reset the current branch to."),
) -> None:
    """Check out a commit and move the current branch to it."""
    with reporting():
        open_repo(ctx).reset(commit_id)


def merge_cmd(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch to merge into the current one."),
) -> None:
    """Three-way merge of a branch into the current branch."""
    with reporting():
        print_merge_result(open_repo(ctx).merge(branch))
