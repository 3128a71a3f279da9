"""Hashing and commit-graph engine."""
