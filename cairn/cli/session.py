"""Shared plumbing for CLI commands: repository lookup and error reporting."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from typer.core import TyperCommand, TyperGroup

from cairn.core.errors import DomainError, StorageError, UsageError
from cairn.core.repository import Repository

console = Console(highlight=False, soft_wrap=True)

# Newer typer releases parse with a bundled copy of click, so the usage
# error class is taken from typer's own exception hierarchy.
CLICK_USAGE_ERROR: type[Exception] = next(
    cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "UsageError"
)


class OperandsCommand(TyperCommand):
    """Command that reports a wrong argument shape as ``Incorrect operands.``

    The unparsed argument list is kept in ``ctx.meta["raw_args"]``: click
    drops a bare ``--`` while parsing, and commands whose meaning depends on
    where ``--`` appears read the raw list instead.
    """

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        ctx.meta["raw_args"] = list(args)
        try:
            return super().parse_args(ctx, args)
        except CLICK_USAGE_ERROR:
            say(str(UsageError()))
            raise typer.Exit()


class CairnGroup(TyperGroup):
    """Top-level group; an unknown command name is reported, not a crash."""

    def resolve_command(self, ctx: typer.Context, args: list[str]):
        try:
            return super().resolve_command(ctx, args)
        except CLICK_USAGE_ERROR:
            say("No command with that name exists.")
            raise typer.Exit()


def repo_root(ctx: typer.Context) -> Path:
    obj = ctx.find_root().obj or {}
    return Path(obj.get("root") or Path.cwd())


def open_repo(ctx: typer.Context) -> Repository:
    return Repository.open(repo_root(ctx))


def say(text: str) -> None:
    """Print user-facing text verbatim (no Rich markup)."""
    console.print(text, markup=False)


@contextmanager
def reporting() -> Iterator[None]:
    """Report cairn errors at the command boundary.

    Usage and domain errors print their message and the command exits 0.
    Storage errors mean repository data was lost and exit 1.
    """
    try:
        yield
    except (UsageError, DomainError) as exc:
        say(str(exc))
    except StorageError as exc:
        console.print(f"[bold red]Repository storage error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
