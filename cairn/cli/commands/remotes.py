"""``cairn add-remote`` / ``rm-remote`` / ``fetch`` / ``push`` / ``pull``."""

from __future__ import annotations

import typer

from cairn.cli.renderer import print_merge_result
from cairn.cli.session import open_repo, reporting


def add_remote_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Remote name."),
    location: str = typer.Argument(..., help="Path to the remote repository."),
) -> None:
    """Register a remote repository."""
    with reporting():
        open_repo(ctx).add_remote(name, location)


def rm_remote_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Remote name."),
) -> None:
    """Forget a remote and its remote-tracking branches."""
    with reporting():
        open_repo(ctx).rm_remote(name)


def fetch_cmd(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote name."),
    branch: str = typer.Argument(..., help="Remote branch to fetch."),
) -> None:
    """Copy a remote branch's objects and record it as REMOTE/BRANCH."""
    with reporting():
        open_repo(ctx).fetch(remote, branch)


def push_cmd(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote name."),
    branch: str = typer.Argument(..., help="Remote branch to extend."),
) -> None:
    """Extend a remote branch with the current branch's history."""
    with reporting():
        open_repo(ctx).push(remote, branch)


def pull_cmd(
    ctx: typer.Context,
    remote: str = typer.Argument(..., help="Remote name."),
    branch: str = typer.Argument(..., help="Remote branch to pull."),
) -> None:
    """Fetch a remote branch and merge it into the current branch."""
    with reporting():
        print_merge_result(open_repo(ctx).pull(remote, branch))
