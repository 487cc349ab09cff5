"""Tests for HTML-to-Markdown body conversion and escaping helpers."""

import pytest

from hnscribe.services.html_converter import (
    convert_body,
    decode_entities,
    escape_frontmatter,
    escape_markdown,
    html_to_markdown,
    is_safe_url,
    wrap_html_tags,
)


class TestHtmlToMarkdown:
    """Test the DOM walk."""

    def test_paragraph_and_preformatted_block(self):
        result = convert_body("<p>Hello <b>world</b></p><pre><code>x&lt;1</code></pre>")
        assert result == "Hello **world**\n\n```\nx<1\n```"
        assert "&lt;" not in result

    def test_leading_text_then_paragraphs(self):
        result = convert_body("First<p>Second<p>Third")
        assert result == "First\n\nSecond\n\nThird"

    def test_italic_and_bold(self):
        assert convert_body("<i>a</i> <em>b</em> <strong>c</strong>") == "*a* *b* **c**"

    def test_inline_code(self):
        assert convert_body("use <code>ls -la</code> here") == "use `ls -la` here"

    def test_code_inside_pre_not_backticked(self):
        result = convert_body("<pre><code>  def f():\n      return 1\n</code></pre>")
        assert result == "```\n  def f():\n      return 1\n```"
        assert "`def" not in result

    def test_pre_content_not_converted(self):
        result = convert_body("<pre><code>&lt;b&gt;raw&lt;/b&gt; <i>x</i></code></pre>")
        assert result == "```\n<b>raw</b> x\n```"

    def test_line_break(self):
        assert convert_body("a<br>b") == "a\nb"

    def test_unknown_elements_flattened(self):
        assert convert_body("<div><span>kept</span> <u>text</u></div>") == "kept text"

    def test_html_comment_dropped(self):
        assert convert_body("a<!-- hidden -->b") == "ab"

    def test_safe_link(self):
        html = '<a href="https://example.com/a" rel="nofollow">https://example.com/a</a>'
        assert convert_body(html) == "[https://example.com/a](https://example.com/a)"

    def test_link_target_parentheses_encoded(self):
        html = '<a href="https://en.wikipedia.org/wiki/X_(y)">wiki</a>'
        assert convert_body(html) == "[wiki](https://en.wikipedia.org/wiki/X_%28y%29)"

    @pytest.mark.parametrize("href", [
        "javascript:alert(1)",
        "JavaScript:alert(1)",
        " javascript:alert(1)",
        "data:text/html;base64,PHNjcmlwdD4=",
        "vbscript:msgbox",
        "//evil.example.com",
    ])
    def test_unsafe_link_degrades_to_text(self, href):
        result = convert_body(f'<a href="{href}">click me</a>')
        assert result == "click me"
        assert "javascript" not in result.lower()
        assert "](" not in result

    def test_entities_decoded_once(self):
        assert html_to_markdown("&amp;lt;b&amp;gt;") == "<b>"
        assert html_to_markdown("&amp;amp;lt;") == "&lt;"

    def test_empty_body(self):
        assert convert_body("") == ""

    def test_fence_longer_than_backticks_in_code(self):
        result = convert_body("<pre><code>```\nx\n```</code></pre>")
        assert result == "````\n```\nx\n```\n````"

    def test_inline_code_containing_backtick(self):
        assert convert_body("run <code>a`b</code> now") == "run `` a`b `` now"

    def test_link_label_brackets_escaped(self):
        html = '<a href="https://a.example">a]b</a>'
        assert convert_body(html) == "[a\\]b](https://a.example)"

    def test_blank_lines_squeezed_outside_code(self):
        result = convert_body("<p>a</p><p></p><p>b</p><pre>x\n\n\n\ny</pre>")
        assert result == "a\n\nb\n\n```\nx\n\n\n\ny\n```"


class TestIsSafeUrl:
    @pytest.mark.parametrize("href", [
        "http://a.example", "https://a.example", "#frag", "/root/path", "item?id=1", "relative/page",
    ])
    def test_allowed(self, href):
        assert is_safe_url(href)

    @pytest.mark.parametrize("href", ["", "javascript:x", "data:x", "mailto:a@b", "//host/p"])
    def test_rejected(self, href):
        assert not is_safe_url(href)


class TestWrapHtmlTags:
    """Test the backtick pass over literal markup."""

    def test_wraps_bare_tags(self):
        assert wrap_html_tags("use <div> and </div>") == "use `<div>` and `</div>`"

    def test_wraps_tags_with_attributes_and_self_closing(self):
        text = 'try <img src="a.png" alt=\'x\' width=40 /> now'
        assert wrap_html_tags(text) == 'try `<img src="a.png" alt=\'x\' width=40 />` now'

    def test_fenced_block_untouched(self):
        text = "before <p>\n```\n<div class=\"x\"></div>\n```\nafter <br/>"
        assert wrap_html_tags(text) == "before `<p>`\n```\n<div class=\"x\"></div>\n```\nafter `<br/>`"

    def test_inline_code_untouched(self):
        assert wrap_html_tags("see `<span>` and <span>") == "see `<span>` and `<span>`"

    def test_code_block_containing_fence_untouched(self):
        html = "<pre><code>```\n&lt;div&gt;\n```</code></pre><p>after &lt;span&gt;</p>"
        assert convert_body(html, wrap_tags=True) == "````\n```\n<div>\n```\n````\n\nafter `<span>`"

    def test_double_backtick_span_untouched(self):
        assert wrap_html_tags("see `` a`<b> `` and <b>") == "see `` a`<b> `` and `<b>`"

    def test_comparisons_not_wrapped(self):
        assert wrap_html_tags("if a < b and c > d") == "if a < b and c > d"

    def test_convert_body_wraps_decoded_markup(self):
        html = "<p>Use &lt;table&gt; for that</p><pre><code>&lt;table&gt;</code></pre>"
        assert convert_body(html, wrap_tags=True) == "Use `<table>` for that\n\n```\n<table>\n```"

    def test_convert_body_without_wrapping(self):
        assert convert_body("Use &lt;table&gt;", wrap_tags=False) == "Use <table>"


class TestEscaping:
    def test_escape_markdown(self):
        assert escape_markdown("a_b*c[d](e)#f+g-h.i!j`k\\l{m}") == (
            "a\\_b\\*c\\[d\\]\\(e\\)\\#f\\+g\\-h\\.i\\!j\\`k\\\\l\\{m\\}"
        )

    def test_escape_markdown_leaves_plain_text(self):
        assert escape_markdown("pg, dang") == "pg, dang"

    def test_escape_frontmatter(self):
        assert escape_frontmatter('a\\b"c\nd\re\tf') == 'a\\\\b\\"c\\nd\\re\\tf'

    def test_decode_entities(self):
        assert decode_entities("&lt;&gt;&amp;&quot;&#x27;&#39;&#x2F;") == "<>&\"''/"
