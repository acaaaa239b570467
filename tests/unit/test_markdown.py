"""Unit tests for markdown_to_html."""

import pytest

from src.ui.markdown import markdown_to_html


class TestMarkdownToHtml:
    def test_escapes_html(self) -> None:
        html = markdown_to_html("<script>alert(1)</script>")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_bold_and_italic(self) -> None:
        html = markdown_to_html("**bold** and *italic*")

        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html

    def test_code_block_keeps_language(self) -> None:
        html = markdown_to_html("```python\nprint('hi')\n```")

        assert '<code class="language-python">' in html
        assert "print('hi')" in html

    def test_code_block_without_language(self) -> None:
        html = markdown_to_html("```\nplain\n```")

        assert "<code>plain</code>" in html

    def test_inline_code(self) -> None:
        html = markdown_to_html("run `ls -la` now")

        assert ">ls -la</code>" in html

    def test_headings(self) -> None:
        html = markdown_to_html("# Title\n## Section\n### Sub")

        assert "Title</h1>" in html
        assert "Section</h2>" in html
        assert "Sub</h3>" in html

    def test_unordered_list(self) -> None:
        html = markdown_to_html("- one\n- two")

        assert html.count("<li>") == 2
        assert "<ul" in html and "</ul>" in html

    def test_ordered_list(self) -> None:
        html = markdown_to_html("1. first\n2. second\nafter")

        assert "<ol" in html
        assert "<li>first</li>" in html
        assert html.endswith("after")

    def test_links(self) -> None:
        html = markdown_to_html("[docs](https://example.com)")

        assert 'href="https://example.com"' in html
        assert ">docs</a>" in html

    @pytest.mark.parametrize(
        "url",
        [
            "javascript:alert(document.cookie)",
            "JavaScript:alert(1)",
            "data:text/html;base64,PHNjcmlwdD4=",
            "vbscript:msgbox",
        ],
    )
    def test_non_web_links_render_as_text(self, url: str) -> None:
        html = markdown_to_html(f"[click me]({url})")

        assert "<a" not in html
        assert "href" not in html
        assert html.startswith("click me")

    def test_link_url_cannot_break_out_of_href(self) -> None:
        html = markdown_to_html('[x](https://example.com/" onclick="alert(1))')

        assert ' onclick="' not in html
        assert "&quot;" in html

    def test_newlines_become_breaks(self) -> None:
        assert markdown_to_html("a\nb") == "a<br>b"

    def test_snake_case_not_italicized(self) -> None:
        assert "<em>" not in markdown_to_html("use max_output_tokens here")
