"""Medium HTML to Markdown renderer.

The input is whitelist-conformant HTML (output of sanitize/normalize), so a
fixed sequence of regex passes is enough. Block elements are rewritten
before inline ones because block patterns carry inline markup through
verbatim.

Known limitations: ordered lists render with "-" bullets, figure captions
are dropped, nested lists and tables are not reconstructed.
"""

import html
import logging
import re

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL

_ATTRIBUTE = re.compile(r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

_H1 = re.compile(r"<h1\b[^>]*>(.*?)</h1>", _FLAGS)
_H2 = re.compile(r"<h2\b[^>]*>(.*?)</h2>", _FLAGS)
_BLOCKQUOTE = re.compile(r"<blockquote\b[^>]*>(.*?)</blockquote>", _FLAGS)
_PRE_CODE = re.compile(r"<pre\b[^>]*>\s*<code\b[^>]*>(.*?)</code>\s*</pre>", _FLAGS)
_HR = re.compile(r"<hr\b[^>]*>", _FLAGS)
_LIST_OPEN = re.compile(r"<(?:ul|ol)\b[^>]*>", _FLAGS)
_LIST_CLOSE = re.compile(r"</(?:ul|ol)>", _FLAGS)
_LIST_ITEM = re.compile(r"<li\b[^>]*>(.*?)</li>", _FLAGS)
_FIGURE = re.compile(r"<figure\b[^>]*>(.*?)</figure>", _FLAGS)
_IMG = re.compile(r"<img\b([^>]*)>", _FLAGS)
_LINK = re.compile(r"<a\b([^>]*)>(.*?)</a>", _FLAGS)
_BOLD = re.compile(r"<(strong|b)\b[^>]*>(.*?)</\1>", _FLAGS)
_ITALIC = re.compile(r"<(em|i)\b[^>]*>(.*?)</\1>", _FLAGS)
_INLINE_CODE = re.compile(r"<code\b[^>]*>(.*?)</code>", _FLAGS)
_PARAGRAPH = re.compile(r"<p\b[^>]*>(.*?)</p>", _FLAGS)
_BR = re.compile(r"<br\b[^>]*>", _FLAGS)
_ANY_TAG = re.compile(r"<[^>]+>")
_BLANK_LINES = re.compile(r"\n{3,}")


def _attributes(raw: str) -> dict[str, str]:
    attrs = {}
    for name, double_quoted, single_quoted in _ATTRIBUTE.findall(raw):
        attrs[name.lower()] = double_quoted or single_quoted
    return attrs


def _image(match: re.Match) -> str:
    attrs = _attributes(match.group(1))
    return f"![{attrs.get('alt', '')}]({attrs.get('src', '')})"


def _figure(match: re.Match) -> str:
    inner = match.group(1)
    img = _IMG.search(inner)
    if img is None:
        # A figure without an image keeps its content
        return f"{inner}\n\n"
    return f"{_image(img)}\n\n"


def _link(match: re.Match) -> str:
    href = _attributes(match.group(1)).get("href")
    text = match.group(2)
    if not href:
        return text
    return f"[{text}]({href})"


def to_markdown(html_content: str | None) -> str:
    """
    Render Medium HTML as Markdown for clipboard export.

    Args:
        html_content: Whitelist-conformant HTML

    Returns:
        Markdown text without leading/trailing whitespace
    """
    if not html_content:
        return ""

    md = html_content

    # Block elements
    md = _H1.sub(r"# \1\n\n", md)
    md = _H2.sub(r"## \1\n\n", md)
    md = _BLOCKQUOTE.sub(r"> \1\n\n", md)
    md = _PRE_CODE.sub(r"```\n\1\n```\n\n", md)
    md = _HR.sub("---\n\n", md)

    # Lists
    md = _LIST_OPEN.sub("", md)
    md = _LIST_CLOSE.sub("\n", md)
    md = _LIST_ITEM.sub(r"- \1\n", md)

    # Images and figures
    md = _FIGURE.sub(_figure, md)
    md = _IMG.sub(_image, md)

    # Inline elements
    md = _LINK.sub(_link, md)
    md = _BOLD.sub(r"**\2**", md)
    md = _ITALIC.sub(r"*\2*", md)
    md = _INLINE_CODE.sub(r"`\1`", md)

    # Paragraphs
    md = _PARAGRAPH.sub(r"\1\n\n", md)
    md = _BR.sub("\n", md)

    md = _ANY_TAG.sub("", md)
    md = html.unescape(md)

    md = _BLANK_LINES.sub("\n\n", md)
    return md.strip()
