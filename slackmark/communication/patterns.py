"""Pattern table for the Markdown → Slack mrkdwn converter.

Every matcher the conversion pipeline uses lives here, compiled once per
process on first use and shared read-only by all conversions afterwards.

A malformed expression is a programming defect, not bad input: building
the table raises PatternTableError and nothing in the converter catches it.
"""

import logging
import re
import threading
from dataclasses import dataclass, fields
from typing import Optional

logger = logging.getLogger("slackmark.patterns")

# Out-of-band byte that opens and closes placeholder tokens.
SENTINEL = "\x00"
# Zero-width space: gives mrkdwn a word boundary next to CJK text.
# See: https://github.com/slackapi/node-slack-sdk/issues/1698
ZWSP = "\u200b"
BULLET = "\u2022"

# Placeholder category tags
CODE_BLOCK = "CB"
INLINE_CODE = "IC"
TABLE = "TB"
LINK = "LK"
BOLD_ITALIC = "BI"
BOLD = "BD"

CATEGORIES = (CODE_BLOCK, INLINE_CODE, TABLE, LINK, BOLD_ITALIC, BOLD)


class PatternTableError(RuntimeError):
    """A pattern in the table failed to compile."""

    def __init__(self, name: str, source: str, error: re.error):
        self.name = name
        self.source = source
        super().__init__(f"Pattern '{name}' is malformed ({error}): {source!r}")


def _paired(tag: str) -> str:
    """<tag>body</tag>, where the body never runs past another <tag>.

    Keeps an unclosed opener from being rescanned to the end of the text
    from every start position.
    """
    return rf"<{tag}>((?:(?!<{tag}>).)*?)</{tag}>"


# ============================================================
# PATTERN SOURCES
# ============================================================
# (name, expression, flags). Order is display order only; the pipeline
# decides the order in which matchers run.
#
# Every expression stays linear on unterminated input: repeated classes
# stop at the next opener of the same construct ('<', '[', '](', '`').

PATTERN_SOURCES: tuple[tuple[str, str, int], ...] = (
    # Normalization
    ("line_ending", r"\r\n?", 0),
    ("sentinel", SENTINEL, 0),
    ("placeholder", SENTINEL + "(" + "|".join(CATEGORIES) + r")(\d+)" + SENTINEL, 0),
    # Literal content
    ("fenced_code", r"```[^\n`]*\n(.*?)```", re.S),
    ("inline_code", r"`([^`\n]+)`", 0),
    # Tables are matched one line at a time
    ("table_row", r"[ \t]*\|.+\|[ \t]*", 0),
    ("table_separator", r"[ \t]*\|[ \t:]*-[ \t:\-|]*\|[ \t]*", 0),
    # HTML tags
    ("html_pre", _paired("pre"), re.S | re.I),
    ("html_code", _paired("code"), re.S | re.I),
    ("html_bold_strong", _paired("strong"), re.S | re.I),
    ("html_bold_b", _paired("b"), re.S | re.I),
    ("html_italic_em", _paired("em"), re.S | re.I),
    ("html_italic_i", _paired("i"), re.S | re.I),
    ("html_strike_del", _paired("del"), re.S | re.I),
    ("html_strike_s", _paired("s"), re.S | re.I),
    ("html_strike_strike", _paired("strike"), re.S | re.I),
    ("html_link", r"""<a\s[^<>]*href=["']([^"'<>]*)["'][^<>]*>((?:(?!<a\s).)*?)</a>""", re.S | re.I),
    ("html_br", r"<br\s*/?>", re.I),
    ("html_heading", r"<h[1-6][^<>]*>((?:(?!<h[1-6]).)*?)</h[1-6]>", re.S | re.I),
    ("html_li", r"<li[^<>]*>((?:(?!<li).)*?)</li>", re.S | re.I),
    ("html_p", r"</?p[^<>]*>", re.I),
    ("html_hr", r"<hr\s*/?>", re.I),
    ("html_any_tag", r"<[^<>]+>", 0),
    # HTML entities
    ("html_entity_lt", r"&lt;", 0),
    ("html_entity_gt", r"&gt;", 0),
    ("html_entity_quot", r"&quot;", 0),
    ("html_entity_apos", r"&#0?39;|&apos;", 0),
    ("html_entity_amp", r"&amp;", 0),
    # Markdown
    ("md_image", r"!\[([^\[\]]*)\]\(((?:(?!\]\()[^)])+)\)", 0),
    ("md_link", r"\[([^\[\]]+)\]\(((?:(?!\]\()[^)])+)\)", 0),
    ("md_bold_italic", r"\*\*\*(.+?)\*\*\*", 0),
    ("md_bold", r"\*\*(.+?)\*\*", 0),
    ("md_italic", r"\*([^*\n]+?)\*", 0),
    ("md_strikethrough", r"~~(.+?)~~", 0),
    ("md_heading", r"^#{1,6}\s+(.+)$", re.M),
    ("md_ul_dash", r"^([ \t]*)- ", re.M),
    ("md_ul_star", r"^([ \t]*)\* ", re.M),
    ("md_hr", r"^[-*_]{3,}[ \t]*$", re.M),
    ("excess_newlines", r"\n{3,}", 0),
    # Zero-width cleanup
    ("zwsp_run", ZWSP + r"{2,}", 0),
    ("zwsp_near_space", r"(?<=\s)" + ZWSP + "|" + ZWSP + r"(?=\s)", 0),
)


@dataclass(frozen=True)
class Patterns:
    """Compiled matchers, one attribute per entry in PATTERN_SOURCES."""

    line_ending: re.Pattern
    sentinel: re.Pattern
    placeholder: re.Pattern
    fenced_code: re.Pattern
    inline_code: re.Pattern
    table_row: re.Pattern
    table_separator: re.Pattern
    html_pre: re.Pattern
    html_code: re.Pattern
    html_bold_strong: re.Pattern
    html_bold_b: re.Pattern
    html_italic_em: re.Pattern
    html_italic_i: re.Pattern
    html_strike_del: re.Pattern
    html_strike_s: re.Pattern
    html_strike_strike: re.Pattern
    html_link: re.Pattern
    html_br: re.Pattern
    html_heading: re.Pattern
    html_li: re.Pattern
    html_p: re.Pattern
    html_hr: re.Pattern
    html_any_tag: re.Pattern
    html_entity_lt: re.Pattern
    html_entity_gt: re.Pattern
    html_entity_quot: re.Pattern
    html_entity_apos: re.Pattern
    html_entity_amp: re.Pattern
    md_image: re.Pattern
    md_link: re.Pattern
    md_bold_italic: re.Pattern
    md_bold: re.Pattern
    md_italic: re.Pattern
    md_strikethrough: re.Pattern
    md_heading: re.Pattern
    md_ul_dash: re.Pattern
    md_ul_star: re.Pattern
    md_hr: re.Pattern
    excess_newlines: re.Pattern
    zwsp_run: re.Pattern
    zwsp_near_space: re.Pattern


def build_patterns(sources: tuple[tuple[str, str, int], ...] = PATTERN_SOURCES) -> Patterns:
    """Compile every pattern source into a Patterns table.

    Args:
        sources: (name, expression, flags) entries; names must match the
            Patterns fields exactly.

    Returns:
        The compiled table

    Raises:
        PatternTableError: An expression failed to compile
    """
    compiled = {}
    for name, source, flags in sources:
        try:
            compiled[name] = re.compile(source, flags)
        except re.error as e:
            raise PatternTableError(name, source, e) from e

    expected = {f.name for f in fields(Patterns)}
    if set(compiled) != expected:
        missing = sorted(expected - set(compiled))
        extra = sorted(set(compiled) - expected)
        raise PatternTableError(
            ", ".join(missing + extra) or "?",
            "",
            re.error(f"table mismatch (missing={missing}, unexpected={extra})"),
        )

    return Patterns(**compiled)


# Process-wide table, built on first use
_patterns: Optional[Patterns] = None
_patterns_lock = threading.Lock()


def get_patterns() -> Patterns:
    """Get or build the shared pattern table.

    Returns:
        The singleton Patterns instance
    """
    global _patterns
    if _patterns is None:
        with _patterns_lock:
            if _patterns is None:
                _patterns = build_patterns()
                logger.debug(f"Pattern table built ({len(PATTERN_SOURCES)} patterns)")
    return _patterns
