"""Command-line interface adapters.

Human-initiated hook management via CLI commands.
"""
