"""Tests for Markdown → Telegram MarkdownV2 conversion."""

import pytest

from tgpages.markdown_v2 import convert_markdown, escape_markdown


class TestEscapeMarkdown:
    @pytest.mark.parametrize(
        "input_text,expected",
        [
            ("a_b*c", "a\\_b\\*c"),
            ("[x](y)", "\\[x\\]\\(y\\)"),
            ("hello world 123", "hello world 123"),
            ("", ""),
        ],
        ids=["emphasis", "link", "alphanumeric-unchanged", "empty-string"],
    )
    def test_escape(self, input_text: str, expected: str) -> None:
        assert escape_markdown(input_text) == expected


class TestConvertMarkdown:
    def test_empty(self) -> None:
        assert convert_markdown("") == ""

    def test_plain_text(self) -> None:
        assert "hello world" in convert_markdown("hello world")

    def test_bold(self) -> None:
        result = convert_markdown("**bold text**")
        assert "*bold text*" in result
        assert "**bold text**" not in result

    def test_special_chars_escaped(self) -> None:
        result = convert_markdown("1. done!")
        assert "\\!" in result

    def test_code_block_preserved(self) -> None:
        result = convert_markdown("```python\nprint('hi')\n```")
        assert "```" in result
        assert "print" in result

    def test_escaped_embed_title_renders_literally(self) -> None:
        result = convert_markdown(f"**{escape_markdown('snake_case')}**")
        assert "snake\\_case" in result
