"""In-process content store.

Holds articles and their per-article meta values. Meta is deleted together
with its article, so a translation never outlives the post it belongs to.
"""

import logging
from typing import Any

from .models.article import Article

logger = logging.getLogger(__name__)

# Meta keys used for translation artifacts
META_TRANSLATION = "_wptomedium_translation"
META_TRANSLATED_TITLE = "_wptomedium_translated_title"
META_STATUS = "_wptomedium_status"


class ArticleStore:
    """Dictionary-backed article and meta storage."""

    def __init__(self) -> None:
        self._articles: dict[int, Article] = {}
        self._meta: dict[int, dict[str, Any]] = {}

    def get_article(self, article_id: int) -> Article | None:
        return self._articles.get(article_id)

    def save_article(self, article: Article) -> Article:
        """Insert or replace an article. Existing meta is kept."""
        self._articles[article.id] = article
        logger.debug(f"Stored article {article.id}")
        return article

    def delete_article(self, article_id: int) -> bool:
        """
        Delete an article and all of its meta.

        Returns:
            True if the article existed
        """
        existed = self._articles.pop(article_id, None) is not None
        self._meta.pop(article_id, None)
        if existed:
            logger.info(f"Deleted article {article_id} and its meta")
        return existed

    def list_articles(self, post_type: str | None = "post") -> list[Article]:
        """Articles ordered newest first, optionally filtered by post type."""
        articles = [
            article
            for article in self._articles.values()
            if post_type is None or article.post_type == post_type
        ]
        articles.sort(key=lambda a: (a.date.timestamp() if a.date else 0.0, a.id), reverse=True)
        return articles

    def get_meta(self, article_id: int, key: str, default: Any = None) -> Any:
        return self._meta.get(article_id, {}).get(key, default)

    def set_meta(self, article_id: int, key: str, value: Any) -> None:
        self._meta.setdefault(article_id, {})[key] = value

    def delete_meta(self, article_id: int, key: str) -> None:
        meta = self._meta.get(article_id)
        if meta is None:
            return
        meta.pop(key, None)
        if not meta:
            del self._meta[article_id]
