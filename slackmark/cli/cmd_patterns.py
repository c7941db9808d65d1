"""Patterns command."""

import re
import sys

from . import cli
from .shared import console, err_console, reveal_invisible

from rich.markup import escape
from rich.table import Table

_FLAG_NAMES = (
    (re.I, "I"),
    (re.M, "M"),
    (re.S, "S"),
)


@cli.command()
def patterns():
    """Show the converter's pattern table."""
    from slackmark.communication.patterns import PATTERN_SOURCES, PatternTableError, get_patterns

    try:
        get_patterns()
    except PatternTableError as e:
        err_console.print(f"[red]Pattern table is broken: {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title="Pattern table")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Flags")
    table.add_column("Expression", overflow="fold")

    for name, source, flags in PATTERN_SOURCES:
        flag_str = "".join(letter for flag, letter in _FLAG_NAMES if flags & flag)
        shown = reveal_invisible(source).replace("\x00", "\\x00")
        table.add_row(name, flag_str, escape(shown))

    console.print(table)
    console.print(f"\n[dim]{len(PATTERN_SOURCES)} patterns compiled[/dim]")
