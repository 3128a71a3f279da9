"""Rich formatting helpers for the MiniGit CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from minigit.models.commit import CommitNode
    from minigit.models.config import StatusInfo
    from minigit.models.merge import MergeResult
    from minigit.models.refs import BranchInfo


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def format_log_compact(entries: list[CommitNode], console: Console) -> None:
    """Display commit log in compact table format."""
    if not entries:
        console.print("[dim]No commits.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Hash", style="yellow", width=8)
    table.add_column("Time", style="dim")
    table.add_column("Message")

    for entry in entries:
        msg = escape(entry.message.splitlines()[0]) if entry.message else ""
        if entry.is_merge:
            msg = f"[magenta]merge[/magenta] {msg}"
        table.add_row(entry.commit_hash[:8], entry.created_at.strftime("%Y-%m-%d %H:%M"), msg)

    console.print(table)


def format_log_verbose(entries: list[CommitNode], console: Console) -> None:
    """Display commit log with full hashes, parents and file counts."""
    if not entries:
        console.print("[dim]No commits.[/dim]")
        return

    for i, entry in enumerate(entries):
        if i > 0:
            console.print()
        console.print(f"[yellow]commit {entry.commit_hash}[/yellow]")
        if entry.is_merge:
            parents = " ".join(p[:8] for p in entry.parent_hashes)
            console.print(f"  Merge:   {parents}")
        console.print(f"  Author:  {escape(entry.author)}")
        console.print(f"  Date:    {entry.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
        console.print(f"  Files:   {len(entry.tracked_files)}")
        console.print()
        for line in entry.message.splitlines() or [""]:
            console.print(f"    {escape(line)}")


def format_status(info: StatusInfo, console: Console) -> None:
    """Display HEAD position, staged and unstaged changes."""
    console.print(escape(str(info.head)))
    if info.merging_branch is not None:
        console.print(
            f"[yellow]Merging {escape(info.merging_branch)}[/yellow] "
            "(resolve conflicts, add, then commit; or merge --abort)"
        )

    sections = [
        ("Unmerged paths", [("both", p) for p in info.conflicts], "red"),
        (
            "Changes to be committed",
            [("new", p) for p in info.staged_added]
            + [("modified", p) for p in info.staged_modified]
            + [("deleted", p) for p in info.staged_removed],
            "green",
        ),
        (
            "Changes not staged",
            [("modified", p) for p in info.unstaged_modified]
            + [("deleted", p) for p in info.unstaged_deleted],
            "red",
        ),
        ("Untracked files", [("", p) for p in info.untracked], "red"),
    ]
    for title, rows, color in sections:
        if not rows:
            continue
        console.print()
        console.print(f"[bold]{title}:[/bold]")
        for label, path in sorted(rows, key=lambda r: r[1]):
            prefix = f"{label}: " if label else ""
            console.print(f"  [{color}]{prefix}{escape(path)}[/{color}]")

    if info.is_clean and not info.untracked:
        console.print("[dim]Nothing to commit, working tree clean.[/dim]")


def format_branches(branches: list[BranchInfo], console: Console) -> None:
    """Display branches, marking the current one with ``*``."""
    if not branches:
        console.print("[dim]No branches.[/dim]")
        return
    for info in branches:
        if info.is_current:
            console.print(f"* [green]{escape(info.name)}[/green] [yellow]{info.commit_hash[:8]}[/yellow]")
        else:
            console.print(f"  {escape(info.name)} [yellow]{info.commit_hash[:8]}[/yellow]")


def format_merge_result(result: MergeResult, console: Console) -> None:
    """Display the outcome of a merge."""
    if result.merge_type == "up_to_date":
        console.print("Already up to date.")
        return
    if result.merge_type == "fast_forward":
        console.print(
            f"Fast-forward to [yellow]{result.theirs_hash[:8]}[/yellow] "
            f"({len(result.merged_files)} files)"
        )
        return
    if result.merge_type == "clean":
        console.print(
            f"Merged [green]{escape(result.source_branch)}[/green]: "
            f"commit [yellow]{(result.commit_hash or '')[:8]}[/yellow]"
        )
        return

    for conflict in result.conflicts:
        console.print(f"[red]{escape(str(conflict))}[/red]")
    console.print(
        f"[yellow]Automatic merge failed[/yellow]: {len(result.conflicts)} conflict(s). "
        "Fix them, add the files, then commit."
    )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
