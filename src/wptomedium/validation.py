"""Request input validation utilities."""

import logging
import re

logger = logging.getLogger(__name__)

TRANSLATABLE_POST_TYPE = "post"

_DIGITS = re.compile(r"^\s*\+?\d+\s*$")


class InvalidArticleIdError(Exception):
    """Raised when an article identifier is missing, malformed or not positive."""

    pass


class ArticleNotFoundError(Exception):
    """Raised when no translatable article exists for a valid identifier."""

    pass


def validate_article_id(value: object) -> int:
    """
    Validate an article identifier coming from a request.

    Accepts positive integers and strings of decimal digits. Booleans,
    floats, negative numbers and zero are rejected.

    Args:
        value: Raw identifier from the request

    Returns:
        The identifier as a positive int

    Raises:
        InvalidArticleIdError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise InvalidArticleIdError("Article ID must be an integer")

    if isinstance(value, int):
        article_id = value
    elif isinstance(value, str) and _DIGITS.match(value):
        article_id = int(value)
    else:
        raise InvalidArticleIdError("Article ID must be an integer")

    if article_id <= 0:
        raise InvalidArticleIdError("Article ID must be greater than zero")

    return article_id


def is_translatable_post_type(post_type: str | None) -> bool:
    """Only regular posts are offered for translation."""
    return post_type == TRANSLATABLE_POST_TYPE
