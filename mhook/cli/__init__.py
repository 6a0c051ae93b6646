"""mhook CLI — Typer-based command-line interface.

Provides the ``mhook`` command with subcommands for reading HEAD, waiting
for a key, downloading and uploading artifacts.

All output uses Rich for formatted terminal display.
"""
