"""minigit commit -- record staged changes."""

from __future__ import annotations

import click
from rich.markup import escape


@click.command()
@click.argument("message", required=False)
@click.option("-m", "--message", "message_opt", default=None, help="Commit message.")
@click.pass_context
def commit(ctx: click.Context, message: str | None, message_opt: str | None) -> None:
    """Commit the staged changes with MESSAGE."""
    from minigit.cli import _repo_session
    from minigit.cli.formatting import format_error

    text = message_opt if message_opt is not None else message
    with _repo_session(ctx) as (repo, console):
        if text is None:
            format_error("A commit message is required (MESSAGE or -m).", console)
            raise SystemExit(1)
        node = repo.commit(text)
        where = repo.current_branch or "detached HEAD"
        console.print(f"{escape(where)} [yellow]{node.commit_hash[:8]}[/yellow] {escape(node.message)}")
