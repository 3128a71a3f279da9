"""minigit checkout -- switch to a branch or commit."""

from __future__ import annotations

import click


@click.command()
@click.argument("target")
@click.pass_context
def checkout(ctx: click.Context, target: str) -> None:
    """Checkout a branch or commit.

    TARGET can be a branch name, commit hash, or hash prefix (min 4 chars).

    Checking out a branch attaches HEAD (commits go to that branch).
    Checking out a commit detaches HEAD.
    """
    from minigit.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        resolved = repo.checkout(target)
        if repo.is_detached:
            console.print(f"HEAD detached at [yellow]{resolved[:8]}[/yellow]")
        else:
            console.print(
                f"Switched to branch [green]{repo.current_branch}[/green] "
                f"([yellow]{resolved[:8]}[/yellow])"
            )
