"""Markdown/HTML to Slack mrkdwn converter.

Slack mrkdwn is a restricted inline markup:
  *bold*, _italic_, ~strike~, `code`, ```code block```, <url|text>

It has no headings, tables or block quotes and emphasis cannot nest.
This module converts common LLM output (Markdown, often mixed with stray
HTML) into mrkdwn.

Content whose final form is already decided (code, tables, links, bold
spans) is swapped for a placeholder token as soon as it is converted, so
later passes cannot rewrite it. All tokens are expanded back at the end.
"""

import logging
from dataclasses import dataclass

from .patterns import (
    BOLD,
    BOLD_ITALIC,
    BULLET,
    CODE_BLOCK,
    INLINE_CODE,
    LINK,
    SENTINEL,
    TABLE,
    ZWSP,
    get_patterns,
)

logger = logging.getLogger("slackmark.mrkdwn")

# In-place emphasis rewrites (group 1 is the inner text)
_ITALIC = ZWSP + r"_\1_" + ZWSP
_STRIKE = ZWSP + r"~\1~" + ZWSP


@dataclass(frozen=True)
class ProtectedSpan:
    """Finished mrkdwn text standing in the working text as a token."""

    category: str
    index: int
    replacement: str

    @property
    def token(self) -> str:
        return f"{SENTINEL}{self.category}{self.index}{SENTINEL}"


class ProtectedSpans:
    """Append-only list of protected spans for a single conversion.

    Indices come from one counter shared by all categories, so every
    token is unique within the conversion.
    """

    def __init__(self):
        self._spans: list[ProtectedSpan] = []

    def __len__(self) -> int:
        return len(self._spans)

    def __iter__(self):
        return iter(self._spans)

    def protect(self, category: str, replacement: str) -> str:
        """Register a span and return the token to put in its place."""
        span = ProtectedSpan(category, len(self._spans), replacement)
        self._spans.append(span)
        return span.token

    def restore(self, text: str) -> str:
        """Expand every token back into its replacement text.

        A span may have been built from text that still held older tokens,
        so each replacement is expanded in turn as it is spliced in. The
        text is scanned once and every token is expanded at most once.
        """
        placeholder = get_patterns().placeholder
        restored = set()

        def expand(m):
            index = int(m.group(2))
            if index >= len(self._spans) or index in restored:
                return m.group(0)
            span = self._spans[index]
            if span.category != m.group(1):
                return m.group(0)
            restored.add(index)
            return placeholder.sub(expand, span.replacement)

        text = placeholder.sub(expand, text)

        for span in self._spans:
            if span.index not in restored:
                # A rewriting pass removed it (e.g. inside a stripped tag)
                logger.debug(f"Placeholder {span.category}{span.index} not found, skipped")
        return text


def _strip_angle_brackets(text: str) -> str:
    return text.replace("<", "").replace(">", "")


def _bold(inner: str) -> str:
    return f"{ZWSP}*{inner}*{ZWSP}"


def md_to_mrkdwn(text: str) -> str:
    """Convert Markdown/HTML text to Slack mrkdwn.

    Handles:
    - ```lang fenced blocks``` → ``` blocks (language dropped, body verbatim)
    - `inline code` → `inline code`
    - Markdown tables → ``` blocks (no table support in mrkdwn)
    - <pre>, <code>, <b>/<strong>, <i>/<em>, <s>/<del>/<strike>, <a href>,
      <br>, <h1>-<h6>, <li>, <p>, <hr>; any other tag is stripped
    - &lt; &gt; &quot; &apos; &#39; &amp; entities
    - ![alt](url) → url, [text](url) → <url|text>
    - ***x*** → *_x_*, **x** → *x*, *x* → _x_, ~~x~~ → ~x~
    - # Heading → *Heading*
    - "- item" / "* item" → "• item"
    - horizontal rules removed, 3+ newlines collapsed to 2

    Emphasis delimiters get a zero-width space on each side so they render
    next to text without spaces (CJK); redundant ones are cleaned up.

    Never raises on input: markup it cannot resolve is left as text.
    """
    if not text:
        return ""

    pat = get_patterns()
    spans = ProtectedSpans()

    # Normalize line endings; drop sentinel bytes so that any sentinel
    # seen from here on belongs to a placeholder token
    text = pat.line_ending.sub("\n", text)
    text = pat.sentinel.sub("", text)
    if not text:
        return ""

    # ── Literal content ─────────────────────────────────────
    text = pat.fenced_code.sub(
        lambda m: spans.protect(CODE_BLOCK, f"```\n{m.group(1)}```"), text
    )
    text = pat.inline_code.sub(
        lambda m: spans.protect(INLINE_CODE, f"`{m.group(1)}`"), text
    )
    text = _protect_tables(text, spans)

    # ── HTML ────────────────────────────────────────────────
    text = pat.html_pre.sub(
        lambda m: spans.protect(CODE_BLOCK, f"```\n{m.group(1)}\n```"), text
    )
    text = pat.html_code.sub(
        lambda m: spans.protect(INLINE_CODE, f"`{m.group(1)}`"), text
    )

    # Bold is protected right away so the italic pass can't eat its '*'
    text = pat.html_bold_strong.sub(lambda m: spans.protect(BOLD, _bold(m.group(1))), text)
    text = pat.html_bold_b.sub(lambda m: spans.protect(BOLD, _bold(m.group(1))), text)

    text = pat.html_italic_em.sub(_ITALIC, text)
    text = pat.html_italic_i.sub(_ITALIC, text)
    text = pat.html_strike_del.sub(_STRIKE, text)
    text = pat.html_strike_s.sub(_STRIKE, text)
    text = pat.html_strike_strike.sub(_STRIKE, text)

    text = pat.html_link.sub(
        lambda m: spans.protect(LINK, f"<{m.group(1)}|{_strip_angle_brackets(m.group(2))}>"),
        text,
    )
    text = pat.html_br.sub("\n", text)
    text = pat.html_heading.sub(
        lambda m: "\n" + spans.protect(BOLD, _bold(m.group(1))) + "\n", text
    )
    text = pat.html_li.sub(BULLET + r" \1" + "\n", text)
    text = pat.html_p.sub("\n", text)
    text = pat.html_hr.sub("", text)

    # Markdown links before the tag strip: [click <here>](url) keeps "here"
    text = pat.md_image.sub(r"\2", text)
    text = pat.md_link.sub(
        lambda m: spans.protect(LINK, f"<{m.group(2)}|{_strip_angle_brackets(m.group(1))}>"),
        text,
    )

    text = pat.html_any_tag.sub("", text)

    # &amp; last, otherwise "&amp;lt;" would end up as "<"
    text = pat.html_entity_lt.sub("<", text)
    text = pat.html_entity_gt.sub(">", text)
    text = pat.html_entity_quot.sub('"', text)
    text = pat.html_entity_apos.sub("'", text)
    text = pat.html_entity_amp.sub("&", text)

    # ── Markdown emphasis (order matters) ───────────────────
    text = pat.md_bold_italic.sub(
        lambda m: spans.protect(BOLD_ITALIC, f"{ZWSP}*_{m.group(1)}_*{ZWSP}"), text
    )
    text = pat.md_bold.sub(
        lambda m: spans.protect(BOLD, _bold(pat.md_italic.sub(_ITALIC, m.group(1)))), text
    )
    text = pat.md_italic.sub(_ITALIC, text)
    text = pat.md_strikethrough.sub(_STRIKE, text)

    # ── Markdown blocks ─────────────────────────────────────
    text = pat.md_heading.sub(lambda m: spans.protect(BOLD, _bold(m.group(1))), text)
    text = pat.md_ul_dash.sub(r"\1" + BULLET + " ", text)
    text = pat.md_ul_star.sub(r"\1" + BULLET + " ", text)
    text = pat.md_hr.sub("", text)
    text = pat.excess_newlines.sub("\n\n", text)

    text = spans.restore(text)
    logger.debug(f"Converted {len(text)} chars, {len(spans)} protected spans")

    return _cleanup(text)


def _protect_tables(text: str, spans: ProtectedSpans) -> str:
    """Swap every Markdown table for a code block token.

    A table is a run of consecutive pipe rows with a separator row after
    the first one. The separator must end in a newline, and the newline
    after the last row is consumed along with the table.
    """
    pat = get_patterns()
    lines = text.split("\n")
    last = len(lines) - 1
    out = []

    i = 0
    while i <= last:
        j = i
        while j <= last and pat.table_row.fullmatch(lines[j]):
            j += 1
        if j == i:
            out.append(lines[i])
            i += 1
            continue

        if not any(pat.table_separator.fullmatch(line) for line in lines[i + 1:min(j, last)]):
            out.extend(lines[i:j])
            i = j
            continue

        token = spans.protect(TABLE, _table_block(lines[i:j]))
        if j <= last:
            out.append(token + lines[j])
            i = j + 1
        else:
            out.append(token)
            i = j

    return "\n".join(out)


def _table_block(rows: list[str]) -> str:
    """Render table rows as a code block, each row trimmed."""
    body = "\n".join(row.strip() for row in rows)
    return f"```\n{body}\n```"


def _cleanup(text: str) -> str:
    """Final pass over restored text: sentinels and zero-width spaces."""
    pat = get_patterns()

    # Nothing should be left after restore; strip before the zero-width
    # pass so a removed byte can't leave two markers touching
    text = pat.sentinel.sub("", text)

    text = pat.zwsp_run.sub(ZWSP, text)
    # Whitespace is already a word boundary
    text = pat.zwsp_near_space.sub("", text)

    return text.strip().strip(ZWSP)
