"""minigit rm -- stop tracking files."""

from __future__ import annotations

import click
from rich.markup import escape


@click.command()
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def rm(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Delete tracked PATHS and stage their removal."""
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        for path in repo.remove(*paths):
            console.print(f"[red]rm[/red] {escape(path)}")
