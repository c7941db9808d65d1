"""Communication sub-core — text sent to Slack.

- Patterns: the shared, compile-once matcher table
- mrkdwn: Markdown/HTML → Slack mrkdwn conversion
- Outbound: message body extraction and conversion before posting
"""

from .patterns import PatternTableError, Patterns, get_patterns
from .mrkdwn import md_to_mrkdwn
from .outbound import (
    extract_blocks,
    extract_message_text,
    extract_thread_ts,
    prepare_initial_comment,
    prepare_outbound_message,
    prepare_outbound_text,
)

__all__ = [
    # Patterns
    "PatternTableError",
    "Patterns",
    "get_patterns",
    # Conversion
    "md_to_mrkdwn",
    # Outbound
    "extract_message_text",
    "extract_thread_ts",
    "extract_blocks",
    "prepare_outbound_text",
    "prepare_outbound_message",
    "prepare_initial_comment",
]
