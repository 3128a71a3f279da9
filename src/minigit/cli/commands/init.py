"""minigit init -- create an empty repository."""

from __future__ import annotations

from pathlib import Path

import click

from minigit.cli.formatting import format_error, get_console


@click.command()
@click.argument("directory", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--default-branch", default=None, help="Name of the first branch (default: main).")
@click.pass_context
def init(ctx: click.Context, directory: Path | None, default_branch: str | None) -> None:
    """Create an empty repository in DIRECTORY (default: --repo or the cwd).

    Running init in an existing repository leaves it unchanged.
    """
    from minigit.exceptions import MiniGitError
    from minigit.models.config import RepoConfig
    from minigit.operations.branch import validate_branch_name
    from minigit.repository import Repository

    console = get_console()
    root = directory or ctx.obj.get("repo_path") or Path.cwd()
    try:
        config = RepoConfig()
        if default_branch is not None:
            validate_branch_name(default_branch)
            config = RepoConfig(default_branch=default_branch)
        repo = Repository.init(root, config=config)
    except MiniGitError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
    console.print(f"Initialized repository in [cyan]{repo.root}[/cyan]")
