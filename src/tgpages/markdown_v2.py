"""Markdown → Telegram MarkdownV2 conversion layer.

Wraps `telegramify_markdown` so page content can be written in standard
Markdown. Embed titles, field names and footers are escaped with
``escape_markdown`` before conversion so they are shown verbatim.

Key function: convert_markdown(text) → MarkdownV2 string.
"""

import re

import mistletoe
from mistletoe.block_token import BlockCode, remove_token
from telegramify_markdown import _update_block, escape_latex
from telegramify_markdown.render import TelegramMarkdownRenderer

# Characters with meaning in standard Markdown input
_MD_ESCAPE_RE = re.compile(r"([\\`*_{}\[\]()#+\-.!|>~])")


def escape_markdown(text: str) -> str:
    """Escape standard Markdown so the text renders literally."""
    return _MD_ESCAPE_RE.sub(r"\\\1", text)


def _markdownify(text: str) -> str:
    """Custom markdownify with our rendering rules.

    Wraps TelegramMarkdownRenderer directly (instead of calling
    telegramify_markdown.markdownify) so we can tweak token rules
    inside the context manager; reset_tokens() in __exit__ would
    otherwise undo any module-level changes.

    Custom rules:
      - Disable indented code blocks (only fenced ``` blocks are code).
    """
    with TelegramMarkdownRenderer(normalize_whitespace=False) as renderer:
        remove_token(BlockCode)
        content = escape_latex(text)
        document = mistletoe.Document(content)
        _update_block(document)
        return renderer.render(document)


def convert_markdown(text: str) -> str:
    """Convert standard Markdown to Telegram MarkdownV2 format."""
    if not text:
        return text
    return _markdownify(text).rstrip("\n")
