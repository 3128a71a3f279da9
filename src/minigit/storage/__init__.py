"""Filesystem storage for MiniGit: objects, refs, index, lock."""
