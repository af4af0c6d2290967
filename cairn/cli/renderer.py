"""Text rendering for log, status and merge output."""

from __future__ import annotations

from collections.abc import Iterable

from cairn.cli.session import say
from cairn.models.commit import Commit
from cairn.models.merge import MergeOutcome, MergeResult
from cairn.models.status import StatusReport

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def format_commit(commit: Commit) -> str:
    lines = ["===", f"commit {commit.digest}"]
    if commit.parent2 is not None and commit.parent is not None:
        lines.append(f"Merge: {commit.parent[:7]} {commit.parent2[:7]}")
    lines.append(f"Date: {commit.timestamp.astimezone().strftime(DATE_FORMAT)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def print_log(commits: Iterable[Commit]) -> None:
    for commit in commits:
        say(format_commit(commit))


def print_status(report: StatusReport) -> None:
    sections = [
        (
            "Branches",
            [f"*{b}" if b == report.current_branch else b for b in report.branches],
        ),
        ("Staged Files", report.staged),
        ("Removed Files", report.removed),
        ("Modifications Not Staged For Commit", report.modified),
        ("Untracked Files", report.untracked),
    ]
    for title, entries in sections:
        say(f"=== {title} ===")
        for entry in entries:
            say(entry)
        say("")


def print_merge_result(result: MergeResult) -> None:
    if result.outcome is MergeOutcome.ALREADY_ANCESTOR:
        say("Given branch is an ancestor of the current branch.")
    elif result.outcome is MergeOutcome.FAST_FORWARD:
        say("Current branch fast-forwarded.")
    elif result.has_conflicts:
        say("Encountered a merge conflict.")
