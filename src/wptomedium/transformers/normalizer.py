"""Block-editor HTML to Medium-ready HTML.

The steps run in a fixed order: gallery detection needs the class
attributes that are stripped afterwards, and the final whitelist pass
assumes headings and tables were already rewritten.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment

from .sanitizer import sanitize

logger = logging.getLogger(__name__)

DEMOTED_HEADINGS = ["h3", "h4", "h5", "h6"]

# Inline markup that survives table folding
TABLE_INLINE_TAGS = frozenset({"strong", "b", "em", "i", "a", "br"})
TABLE_CELL_TAGS = ["td", "th", "tr", "caption"]

GALLERY_CLASSES = frozenset({"wp-block-gallery", "gallery"})

_WHITESPACE = re.compile(r"\s+")


def strip_block_comments(soup: BeautifulSoup) -> None:
    """Remove editor comment markers such as <!-- wp:paragraph -->."""
    for node in list(soup.descendants):
        if isinstance(node, Comment):
            node.extract()


def demote_headings(soup: BeautifulSoup) -> None:
    """Rewrite h3-h6 as h2; Medium only knows two heading levels."""
    for heading in soup.find_all(DEMOTED_HEADINGS):
        heading.name = "h2"
        heading.attrs = {}


def fold_tables(soup: BeautifulSoup) -> None:
    """Replace every table with a single paragraph of its text."""
    for table in soup.find_all("table"):
        # Nested tables disappear when their outer table is folded
        if table.parent is None:
            continue

        for cell in table.find_all(TABLE_CELL_TAGS):
            cell.append(" ")
        for tag in table.find_all(True):
            if tag.name not in TABLE_INLINE_TAGS:
                tag.unwrap()

        inner = _WHITESPACE.sub(" ", table.decode_contents()).strip()
        paragraph = soup.new_tag("p")
        fragment = BeautifulSoup(inner, "html.parser")
        paragraph.extend(list(fragment.contents))
        table.replace_with(paragraph)


def _is_gallery(tag: Tag) -> bool:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return any(cls in GALLERY_CLASSES for cls in classes)


def _gallery_figures(soup: BeautifulSoup, gallery: Tag) -> list[Tag]:
    figures = []
    for img in gallery.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        new_img = soup.new_tag("img", attrs={"src": src, "alt": img.get("alt", "")})
        figure = soup.new_tag("figure")
        figure.append(new_img)
        figures.append(figure)
    return figures


def flatten_galleries(soup: BeautifulSoup) -> None:
    """Replace gallery containers with one <figure><img></figure> per image.

    Captions and layout wrappers are discarded. A gallery that cannot be
    rebuilt is left as it is.
    """
    for gallery in soup.find_all(_is_gallery):
        if gallery.find_parent(_is_gallery) is not None:
            continue
        try:
            figures = _gallery_figures(soup, gallery)
            if not figures:
                gallery.decompose()
                continue
            gallery.replace_with(*figures)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Leaving gallery unchanged, could not flatten it: {e}")


def strip_presentation(soup: BeautifulSoup) -> None:
    """Drop class and style attributes everywhere."""
    for tag in soup.find_all(True):
        tag.attrs.pop("class", None)
        tag.attrs.pop("style", None)


def normalize(raw_html: str | None) -> str:
    """
    Convert rendered block-editor HTML into whitelist-ready Medium HTML.

    Steps, in order:
        1. strip editor comment markers
        2. demote h3-h6 to h2
        3. fold tables into paragraphs
        4. flatten image galleries
        5. strip class and style attributes
        6. sanitize against the Medium whitelist

    Args:
        raw_html: Rendered post body

    Returns:
        Sanitized HTML (empty string for empty input)
    """
    if not raw_html or not raw_html.strip():
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")

    strip_block_comments(soup)
    demote_headings(soup)
    fold_tables(soup)
    flatten_galleries(soup)
    strip_presentation(soup)

    return sanitize(str(soup))
