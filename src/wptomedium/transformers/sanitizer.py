"""Medium-safe HTML sanitizer.

Medium only accepts a small subset of HTML. Everything outside the
allow-list below is unwrapped (its text survives, its markup does not) and
every attribute that is not explicitly allowed is dropped.
"""

import logging
import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

# Allowed tag name -> allowed attribute names
MEDIUM_TAGS: dict[str, frozenset[str]] = {
    "h1": frozenset(),
    "h2": frozenset(),
    "p": frozenset(),
    "a": frozenset({"href"}),
    "strong": frozenset(),
    "b": frozenset(),
    "em": frozenset(),
    "i": frozenset(),
    "blockquote": frozenset(),
    "figure": frozenset(),
    "figcaption": frozenset(),
    "img": frozenset({"src", "alt"}),
    "ul": frozenset(),
    "ol": frozenset(),
    "li": frozenset(),
    "pre": frozenset(),
    "code": frozenset(),
    "hr": frozenset(),
    "br": frozenset(),
}

# Removed together with their content before whitelist filtering. html.parser
# reads "<scr<script>" as one tag named "scr<script", so the last token counts.
DANGEROUS_TAGS = re.compile(r"(?:^|<)(?:script|style)$")

URL_ATTRIBUTES = frozenset({"href", "src"})
ALLOWED_SCHEMES = frozenset({"http", "https", "mailto"})

_CONTROL_CHARS = re.compile(r"[\x00-\x20\x7f]+")

# Parsed nodes that never carry rendered text
_MARKUP_ONLY_NODES = (CData, Comment, Declaration, Doctype, ProcessingInstruction)


def is_safe_url(value: str) -> bool:
    """Return True for relative URLs and URLs with an allowed scheme.

    Browsers ignore embedded whitespace and control characters inside a
    scheme, so they are removed before looking at it.
    """
    compact = _CONTROL_CHARS.sub("", value)
    if not compact:
        return True
    try:
        scheme = urlsplit(compact).scheme
    except ValueError:
        return False
    return not scheme or scheme.lower() in ALLOWED_SCHEMES


def _filter_attributes(tag: Tag) -> None:
    allowed = MEDIUM_TAGS[tag.name]
    kept = {}
    for name, value in tag.attrs.items():
        if name not in allowed:
            continue
        if isinstance(value, list):
            value = " ".join(value)
        if name in URL_ATTRIBUTES and not is_safe_url(value):
            logger.debug(f"Dropping unsafe {name} on <{tag.name}>")
            continue
        kept[name] = value
    tag.attrs = kept


def sanitize(html: str | None) -> str:
    """
    Reduce HTML to the Medium tag/attribute whitelist.

    Script and style elements are removed with their content first; the
    remaining tree is then walked and every unlisted element unwrapped.
    Running the function on its own output returns the same string.

    Args:
        html: Arbitrary HTML fragment

    Returns:
        Whitelist-conformant HTML fragment
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(DANGEROUS_TAGS):
        tag.decompose()

    for node in list(soup.descendants):
        if isinstance(node, _MARKUP_ONLY_NODES):
            node.extract()

    for tag in soup.find_all(True):
        if tag.name in MEDIUM_TAGS:
            _filter_attributes(tag)
        else:
            tag.unwrap()

    # Re-parse so merged whitespace-only strings collapse the way a later
    # parse of the output would collapse them
    return str(BeautifulSoup(str(soup), "html.parser")).strip()


def sanitize_text(value: str | None) -> str:
    """
    Sanitize a single-line text value such as a title.

    Markup is stripped, whitespace (including line breaks) collapsed to
    single spaces and the result trimmed.
    """
    if not value:
        return ""

    soup = BeautifulSoup(value, "html.parser")
    for tag in soup.find_all(DANGEROUS_TAGS):
        tag.decompose()

    text = soup.get_text()
    return re.sub(r"\s+", " ", text).strip()
