"""minigit status -- show working tree status."""

from __future__ import annotations

import click

from minigit.cli.formatting import format_status


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show HEAD position, staged, unstaged and untracked files."""
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        format_status(repo.status(), console)
