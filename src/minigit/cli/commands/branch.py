"""minigit branch -- list or create branches."""

from __future__ import annotations

import click

from minigit.cli.formatting import format_branches


@click.command()
@click.argument("name", required=False)
@click.pass_context
def branch(ctx: click.Context, name: str | None) -> None:
    """Create branch NAME at HEAD, or list branches when NAME is omitted.

    An existing branch with the same name is moved to HEAD.
    """
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        if name is None:
            format_branches(repo.list_branches(), console)
            return
        commit_hash = repo.branch(name)
        console.print(f"Branch [green]{name}[/green] at [yellow]{commit_hash[:8]}[/yellow]")
