"""Outbound message processing — turn an agent value into a Slack message body.

Handles:
- Text extraction from the values a posting agent receives
  (plain strings, {"text": ...} payloads, chat messages, lists of either)
- Optional Markdown → mrkdwn conversion (convert_markdown, on by default)
- Image captions (initial_comment), which are omitted when empty
- Block Kit blocks and thread_ts, carried over from payloads unchanged

Network delivery is not done here: prepare_outbound_message returns the
request body and callers send it.
"""

import json
from collections.abc import Mapping
from typing import Any, Optional

from .mrkdwn import md_to_mrkdwn


# ============================================================
# TEXT EXTRACTION
# ============================================================

def _message_content(value: Any) -> Optional[str]:
    """Return the text of a chat message object (anything with .content)."""
    content = getattr(value, "content", None)
    return content if isinstance(content, str) else None


def extract_message_text(value: Any) -> str:
    """Extract the message body from an outgoing value.

    Args:
        value: String, mapping with a "text" key, chat message with a
            .content string, or a list/tuple of strings and messages

    Returns:
        The text to post. Values of any other shape are rendered as
        pretty-printed JSON inside a code block.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value

    if isinstance(value, Mapping):
        text = value.get("text")
        return text if isinstance(text, str) else ""

    if isinstance(value, (list, tuple)):
        texts = []
        for item in value:
            if isinstance(item, str):
                texts.append(item)
                continue
            content = _message_content(item)
            if content is not None:
                texts.append(content)
        return "\n".join(texts)

    content = _message_content(value)
    if content is not None:
        return content

    dumped = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    return f"```\n{dumped}\n```"


def extract_thread_ts(value: Any) -> Optional[str]:
    """Return the thread timestamp of a {"thread_ts": ...} payload, if any.

    Any string is passed through as given, the empty string included.
    """
    if isinstance(value, Mapping):
        ts = value.get("thread_ts")
        if isinstance(ts, str):
            return ts
    return None


def extract_blocks(value: Any) -> Optional[list]:
    """Return the Block Kit blocks of a {"blocks": [...]} payload, if any.

    Blocks are posted next to the text field untouched: they are already
    structured, so no Markdown conversion applies to them.
    """
    if isinstance(value, Mapping):
        blocks = value.get("blocks")
        if isinstance(blocks, list):
            return blocks
    return None


# ============================================================
# COMBINED OUTBOUND PIPELINE
# ============================================================

def prepare_outbound_text(value: Any, convert_markdown: bool = True) -> str:
    """Build the text field of an outgoing Slack message.

    Args:
        value: Anything extract_message_text accepts
        convert_markdown: Convert Markdown/HTML to mrkdwn

    Returns:
        Message body ready to post
    """
    text = extract_message_text(value)
    if convert_markdown:
        return md_to_mrkdwn(text)
    return text


def prepare_initial_comment(content: Optional[str], convert_markdown: bool = True) -> Optional[str]:
    """Build the caption posted alongside an uploaded file.

    Returns None for empty content so no empty comment is attached.
    """
    if not content:
        return None
    if convert_markdown:
        return md_to_mrkdwn(content)
    return content


def prepare_outbound_message(value: Any, convert_markdown: bool = True) -> dict:
    """Build the body of a chat.postMessage call from an agent value.

    Returns:
        Dict with "text", plus "blocks" and "thread_ts" when the value
        carries them
    """
    message = {"text": prepare_outbound_text(value, convert_markdown=convert_markdown)}

    blocks = extract_blocks(value)
    if blocks is not None:
        message["blocks"] = blocks

    thread_ts = extract_thread_ts(value)
    if thread_ts is not None:
        message["thread_ts"] = thread_ts

    return message
