"""minigit log -- show commit history."""

from __future__ import annotations

import click

from minigit.cli.formatting import format_log_compact, format_log_verbose


@click.command()
@click.option("-n", "--limit", default=None, type=int, help="Maximum number of commits to show.")
@click.option("--full", is_flag=True, help="Show full hashes, parents and dates.")
@click.pass_context
def log(ctx: click.Context, limit: int | None, full: bool) -> None:
    """Show first-parent history from HEAD backward."""
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        entries = repo.log(limit=limit)
        if full:
            format_log_verbose(entries, console)
        else:
            format_log_compact(entries, console)
