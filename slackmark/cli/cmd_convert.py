"""Convert command."""

import sys
from typing import Optional

import click

from . import cli
from .shared import err_console, reveal_invisible, setup_logging

from rich.markup import escape


@cli.command()
@click.argument("file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--raw", is_flag=True, help="Pass text through without mrkdwn conversion.")
@click.option("--reveal", is_flag=True, help="Show zero-width spaces as <ZWSP>.")
def convert(file: Optional[str], raw: bool, reveal: bool):
    """Convert FILE (or stdin) to Slack mrkdwn and print it."""
    from slackmark.config import load_settings
    from slackmark.communication import PatternTableError, prepare_outbound_text

    settings = load_settings()
    setup_logging(settings.log_level)

    if file:
        with open(file, encoding="utf-8") as f:
            text = f.read()
    else:
        text = sys.stdin.read()

    try:
        result = prepare_outbound_text(text, convert_markdown=settings.convert_markdown and not raw)
    except PatternTableError as e:
        err_console.print(f"[red]Pattern table is broken: {escape(str(e))}[/red]")
        sys.exit(1)

    if reveal or settings.reveal_invisible:
        result = reveal_invisible(result)

    # click.echo, not rich: mrkdwn brackets must not be parsed as markup
    click.echo(result)
