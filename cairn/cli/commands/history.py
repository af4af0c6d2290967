"""``cairn log`` / ``global-log`` / ``find`` / ``status``: read-only views."""

from __future__ import annotations

import typer

from cairn.cli.renderer import print_log, print_status
from cairn.cli.session import open_repo, reporting, say


def log_cmd(ctx: typer.Context) -> None:
    """Show first-parent history from the current commit back to the root."""
    with reporting():
        print_log(open_repo(ctx).log())


def global_log_cmd(ctx: typer.Context) -> None:
    """Show every commit ever made, in creation order."""
    with reporting():
        print_log(open_repo(ctx).global_log())


def find_cmd(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Exact commit message to look for."),
) -> None:
    """Print the ids of all commits with the given message."""
    with reporting():
        for commit in open_repo(ctx).find(message):
            say(commit.digest)


def status_cmd(ctx: typer.Context) -> None:
    """Show branches, staged changes, and the state of the working tree."""
    with reporting():
        print_status(open_repo(ctx).status())
