"""minigit merge -- merge a branch into HEAD."""

from __future__ import annotations

import click

from minigit.cli.formatting import format_merge_result


@click.command()
@click.argument("source", required=False)
@click.option("--ff", "fast_forward", is_flag=True, help="Fast-forward instead of creating a merge commit when possible.")
@click.option("--abort", is_flag=True, help="Abandon a conflicted merge and restore HEAD's files.")
@click.pass_context
def merge(ctx: click.Context, source: str | None, fast_forward: bool, abort: bool) -> None:
    """Merge SOURCE branch into the current HEAD.

    Conflicting files are left with conflict markers.  Edit them, add
    them, and commit to finish the merge.
    """
    from minigit.cli import _repo_session
    from minigit.cli.formatting import format_error

    with _repo_session(ctx) as (repo, console):
        if abort:
            repo.abort_merge()
            console.print("Merge aborted.")
            return
        if source is None:
            format_error("Missing SOURCE branch.", console)
            raise SystemExit(1)
        result = repo.merge(source, fast_forward=fast_forward)
        format_merge_result(result, console)
        if result.merge_type == "conflict":
            raise SystemExit(1)
