"""minigit add -- stage files for the next commit."""

from __future__ import annotations

import click
from rich.markup import escape

from minigit.storage.index import REMOVED


@click.command()
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def add(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Stage PATHS (files or directories) for the next commit."""
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        staged = repo.add(*paths)
        for path, blob_hash in sorted(staged.items()):
            if blob_hash == REMOVED:
                console.print(f"[red]removed[/red] {escape(path)}")
            else:
                console.print(f"[green]staged[/green]  {escape(path)}")
