"""MiniGit CLI subcommands."""
