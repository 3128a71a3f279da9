"""MiniGit CLI -- terminal interface for the MiniGit repository engine.

This module is never imported from minigit/__init__.py.
It is only loaded via the ``minigit`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.logging import RichHandler

from minigit.cli.formatting import format_error, get_console
from minigit.exceptions import MiniGitError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from minigit.repository import Repository


@click.group()
@click.option(
    "--repo",
    default=None,
    envvar="MINIGIT_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="Repository root (discovered from the current directory if omitted).",
)
@click.option("-v", "--verbose", count=True, help="Show log output (-vv for debug).")
@click.pass_context
def cli(ctx: click.Context, repo: Path | None, verbose: int) -> None:
    """MiniGit: a minimal content-addressed version control system."""
    ctx.ensure_object(dict)
    ctx.obj["repo_path"] = repo
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=get_console(stderr=True), show_path=False)],
        )


def _get_repo(ctx: click.Context) -> Repository:
    """Open the repository named by --repo, or discover one from the cwd."""
    from minigit.repository import Repository

    repo_path = ctx.obj.get("repo_path")
    if repo_path is not None:
        return Repository.open(repo_path)
    return Repository.discover(Path.cwd())


@contextmanager
def _repo_session(ctx: click.Context) -> Iterator[tuple[Repository, Console]]:
    """Open a repository, yield (repo, console), and format MiniGit errors.

    Commands that handle specific errors themselves catch them inside the
    ``with`` block before this generic handler runs.
    """
    console = get_console()
    try:
        yield _get_repo(ctx), console
    except MiniGitError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from minigit.cli.commands.init import init  # noqa: E402
from minigit.cli.commands.add import add  # noqa: E402
from minigit.cli.commands.rm import rm  # noqa: E402
from minigit.cli.commands.commit import commit  # noqa: E402
from minigit.cli.commands.log import log  # noqa: E402
from minigit.cli.commands.branch import branch  # noqa: E402
from minigit.cli.commands.checkout import checkout  # noqa: E402
from minigit.cli.commands.merge import merge  # noqa: E402
from minigit.cli.commands.status import status  # noqa: E402

cli.add_command(init)
cli.add_command(add)
cli.add_command(rm)
cli.add_command(commit)
cli.add_command(log)
cli.add_command(branch)
cli.add_command(checkout)
cli.add_command(merge)
cli.add_command(status)
