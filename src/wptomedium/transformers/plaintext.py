"""Visible text of an HTML fragment."""

import re

from bs4 import BeautifulSoup

# Elements whose text never counts as content
NON_CONTENT_TAGS = ["script", "style", "template", "noscript"]


def html_to_plaintext(html: str | bytes) -> str:
    """
    Extract the text a reader would see.

    Used to decide whether a translated fragment has any content at all:
    markup such as ``<p></p>`` or a lone ``<img>`` yields an empty string.

    Args:
        html: Fragment as str or UTF-8 bytes

    Returns:
        Text with whitespace runs collapsed to single spaces
    """
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="ignore")

    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "lxml")
    for node in soup.find_all(NON_CONTENT_TAGS):
        node.decompose()

    return re.sub(r"\s+", " ", soup.get_text(separator=" ", strip=True)).strip()
