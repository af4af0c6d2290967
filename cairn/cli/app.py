"""Main Typer application: imports and registers all CLI commands.

Entry point: ``cairn`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from cairn.cli.commands.branches import (
    branch_cmd,
    checkout_cmd,
    merge_cmd,
    reset_cmd,
    rm_branch_cmd,
)
from cairn.cli.commands.history import find_cmd, global_log_cmd, log_cmd, status_cmd
from cairn.cli.commands.remotes import (
    add_remote_cmd,
    fetch_cmd,
    pull_cmd,
    push_cmd,
    rm_remote_cmd,
)
from cairn.cli.commands.staging_cmds import add_cmd, commit_cmd, init_cmd, rm_cmd
from cairn.cli.session import CairnGroup, OperandsCommand
from cairn.config import config

app = typer.Typer(
    name="cairn",
    cls=CairnGroup,
    help="Cairn: a local-first, content-addressed version-control system.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    repo_root: Path = typer.Option(
        None,
        "--repo-root",
        "-C",
        help="Working-tree root of the repository (default: current directory).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Cairn: a local-first, content-addressed version-control system."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")
    ctx.ensure_object(dict)
    ctx.obj["root"] = repo_root


# Register subcommands
app.command(name="init", help="Create a new repository.", cls=OperandsCommand)(init_cmd)
app.command(name="add", help="Stage a file.", cls=OperandsCommand)(add_cmd)
app.command(name="rm", help="Unstage a file or stage its removal.", cls=OperandsCommand)(rm_cmd)
app.command(name="commit", help="Commit the staged changes.", cls=OperandsCommand)(commit_cmd)
app.command(name="log", help="Show history of the current branch.", cls=OperandsCommand)(log_cmd)
app.command(name="global-log", help="Show every commit ever made.", cls=OperandsCommand)(global_log_cmd)
app.command(name="find", help="Find commits by message.", cls=OperandsCommand)(find_cmd)
app.command(name="status", help="Show the working tree status.", cls=OperandsCommand)(status_cmd)
app.command(name="branch", help="Create a branch.", cls=OperandsCommand)(branch_cmd)
app.command(name="rm-branch", help="Delete a branch.", cls=OperandsCommand)(rm_branch_cmd)
app.command(name="checkout", help="Restore a file or switch branches.", cls=OperandsCommand)(checkout_cmd)
app.command(name="reset", help="Reset the current branch to a commit.", cls=OperandsCommand)(reset_cmd)
app.command(name="merge", help="Merge a branch into the current branch.", cls=OperandsCommand)(merge_cmd)
app.command(name="add-remote", help="Register a remote repository.", cls=OperandsCommand)(add_remote_cmd)
app.command(name="rm-remote", help="Remove a remote.", cls=OperandsCommand)(rm_remote_cmd)
app.command(name="fetch", help="Fetch a branch from a remote.", cls=OperandsCommand)(fetch_cmd)
app.command(name="push", help="Push the current branch to a remote branch.", cls=OperandsCommand)(push_cmd)
app.command(name="pull", help="Fetch and merge a remote branch.", cls=OperandsCommand)(pull_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
