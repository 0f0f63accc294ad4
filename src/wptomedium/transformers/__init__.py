"""Content transformations between raw post HTML, Medium HTML, Markdown and text."""

from .markdown import to_markdown
from .normalizer import normalize
from .plaintext import html_to_plaintext
from .sanitizer import MEDIUM_TAGS, sanitize, sanitize_text

__all__ = [
    "MEDIUM_TAGS",
    "html_to_plaintext",
    "normalize",
    "sanitize",
    "sanitize_text",
    "to_markdown",
]
