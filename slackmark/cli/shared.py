"""Shared utilities for Slackmark CLI commands."""

import logging

from rich.console import Console

from slackmark.communication.patterns import ZWSP

console = Console()
err_console = Console(stderr=True)

_logging_configured = False


def setup_logging(level: str) -> None:
    """Configure the slackmark logger once per process (stderr)."""
    global _logging_configured
    if not _logging_configured:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        )
        _logging_configured = True
    logging.getLogger("slackmark").setLevel(level)


def reveal_invisible(text: str) -> str:
    """Make zero-width spaces visible for inspection."""
    return text.replace(ZWSP, "<ZWSP>")
