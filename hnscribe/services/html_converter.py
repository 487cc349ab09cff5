"""HTML comment bodies to Markdown, plus Markdown/frontmatter escaping.

Bodies are untrusted. They are parsed into a DOM and walked; regular
expressions are only applied afterwards, to plain text, for the cosmetic
tag-wrapping pass.
"""

import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

_ENTITIES = {
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&#x27;": "'",
    "&#39;": "'",
    "&#x2F;": "/",
}
_ENTITY_PATTERN = re.compile("|".join(re.escape(entity) for entity in _ENTITIES))

_MARKDOWN_SPECIAL = re.compile(r'([\\`*_{}\[\]()#+\-.!])')

# A code span or fence closes on a backtick run of exactly its opening length.
_FENCED_BLOCK = re.compile(r'(?<!`)(`{3,})(?!`).*?(?<!`)\1(?!`)', re.DOTALL)
_INLINE_CODE = re.compile(r'(?<!`)(`+)(?!`).+?(?<!`)\1(?!`)')
_BACKTICK_RUN = re.compile(r'`+')
_LINK_LABEL_SPECIAL = re.compile(r'([\[\]])')
_EXTRA_BLANK_LINES = re.compile(r'\n{3,}')
_HTML_TAG = re.compile(
    r'</?[a-zA-Z][a-zA-Z0-9]*'
    r'(?:\s+[a-zA-Z_:][-a-zA-Z0-9_:.]*'
    r'(?:\s*=\s*(?:"[^"]*"|\'[^\']*\'|[^\'"<>\s`]+))?)*'
    r'\s*/?>'
)


def is_safe_url(href: str) -> bool:
    """Allow http(s), same-document fragments, root-relative paths and
    bare relative paths. Everything else (javascript:, data:, vbscript:,
    protocol-relative //host) is rejected.
    """
    if not href:
        return False
    candidate = href.strip().lower()
    if candidate.startswith(("http://", "https://", "#")):
        return True
    if candidate.startswith("//"):
        return False
    if candidate.startswith("/"):
        return True
    return ":" not in candidate


def decode_entities(text: str) -> str:
    """Decode the basic entities in one pass: "&amp;lt;" becomes "&lt;"."""
    return _ENTITY_PATTERN.sub(lambda match: _ENTITIES[match.group(0)], text)


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL.sub(r'\\\1', text)


def escape_frontmatter(text: str) -> str:
    """Escape a value for a double-quoted frontmatter string."""
    return (text
            .replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace('\n', '\\n')
            .replace('\r', '\\r')
            .replace('\t', '\\t'))


def _link_target(href: str) -> str:
    # Keep the target inside the (...) of a Markdown link.
    return href.strip().replace(' ', '%20').replace('(', '%28').replace(')', '%29')


def _longest_backtick_run(text: str) -> int:
    return max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)


def _fence(code: str) -> str:
    return "`" * max(3, _longest_backtick_run(code) + 1)


def _code_span(text: str) -> str:
    if "`" not in text:
        return f"`{text}`"
    ticks = "`" * (_longest_backtick_run(text) + 1)
    return f"{ticks} {text} {ticks}"


def _convert_children(node: Tag) -> str:
    return "".join(_convert_node(child) for child in node.children)


def _convert_node(node: PageElement) -> str:
    if isinstance(node, NavigableString):
        if isinstance(node, PreformattedString):
            return ""
        return str(node)
    if not isinstance(node, Tag):
        return ""

    name = node.name.lower()
    if name == "p":
        return "\n\n" + _convert_children(node)
    if name == "a":
        text = node.get_text()
        href = node.get("href") or ""
        if is_safe_url(href):
            label = _LINK_LABEL_SPECIAL.sub(r'\\\1', text)
            return f"[{label}]({_link_target(href)})"
        return text
    if name == "pre":
        code = node.get_text().rstrip("\n")
        fence = _fence(code)
        return f"\n\n{fence}\n{code}\n{fence}\n\n"
    if name == "code":
        text = node.get_text()
        if node.find_parent("pre") is not None:
            return text
        return _code_span(text)
    if name in ("i", "em"):
        return f"*{_convert_children(node)}*"
    if name in ("b", "strong"):
        return f"**{_convert_children(node)}**"
    if name == "br":
        return "\n"
    return _convert_children(node)


def html_to_markdown(html: str) -> str:
    """Walk an HTML fragment and emit Markdown, then decode leftover entities."""
    if not html:
        return ""
    fragment = BeautifulSoup(html, "html.parser")
    return decode_entities(_collapse_blank_lines(_convert_children(fragment)))


def _map_outside(pattern: re.Pattern, text: str, transform) -> str:
    """Apply transform to the text between matches of pattern."""
    pieces = []
    position = 0
    for match in pattern.finditer(text):
        pieces.append(transform(text[position:match.start()]))
        pieces.append(match.group(0))
        position = match.end()
    pieces.append(transform(text[position:]))
    return "".join(pieces)


def _collapse_blank_lines(text: str) -> str:
    """Squeeze runs of blank lines between blocks, leaving code untouched."""
    return _map_outside(_FENCED_BLOCK, text, lambda part: _EXTRA_BLANK_LINES.sub("\n\n", part))


def _wrap_tags_outside_inline_code(text: str) -> str:
    return _map_outside(
        _INLINE_CODE, text, lambda part: _HTML_TAG.sub(lambda match: f"`{match.group(0)}`", part)
    )


def wrap_html_tags(text: str) -> str:
    """Wrap literal HTML tags in backticks, skipping fenced blocks and
    inline code spans.
    """
    return _map_outside(_FENCED_BLOCK, text, _wrap_tags_outside_inline_code)


def convert_body(html: str, wrap_tags: bool = False) -> str:
    """Full body pipeline: DOM walk, entity decode, optional tag wrapping."""
    text = html_to_markdown(html)
    if wrap_tags:
        text = wrap_html_tags(text)
    return text.strip()
