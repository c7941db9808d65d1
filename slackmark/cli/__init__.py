"""Slackmark CLI — command line interface."""

import os
import sys
from typing import Optional

import click
from slackmark import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="slackmark")
@click.pass_context
def cli(ctx):
    """Slackmark — Markdown/HTML to Slack mrkdwn"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]Slackmark v{__version__}[/bold] — Markdown/HTML to Slack mrkdwn\n")

    commands = [
        ("convert", "Convert a file (or stdin) to mrkdwn"),
        ("patterns", "List the converter's pattern table"),
    ]

    console.print("  [bold cyan]Usage[/bold cyan]")
    for name, desc in commands:
        console.print(f"    [bold]slackmark {name:10s}[/bold] {desc}")
    console.print()

    console.print("[dim]Run 'slackmark <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_convert  # noqa: E402, F401
from . import cmd_patterns  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()


def main(argv: Optional[list[str]] = None):
    """CLI entry point.

    Args:
        argv: Arguments after the program name (defaults to sys.argv[1:])
    """
    # Not standalone: usage errors point at 'slackmark help' instead of --help
    try:
        cli(args=argv, prog_name="slackmark", standalone_mode=False)
    except click.UsageError as e:
        if e.ctx:
            click.echo(e.ctx.command.get_usage(e.ctx), err=True)
        click.echo("Try 'slackmark help' for help.\n", err=True)
        click.echo(f"Error: {e.format_message()}", err=True)
        sys.exit(2)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.exceptions.Exit as e:
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except BrokenPipeError:
        # Reader closed early (slackmark convert | head); point stdout at
        # devnull so the interpreter's final flush doesn't fail again
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)
