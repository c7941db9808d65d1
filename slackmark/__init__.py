"""Slackmark — Markdown/HTML to Slack mrkdwn for LLM output."""

__version__ = "0.3.0"

from .communication import md_to_mrkdwn  # noqa: E402

__all__ = ["__version__", "md_to_mrkdwn"]
