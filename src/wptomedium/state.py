"""Per-article translation status transitions."""

import logging

from .models.article import ArticleStatus
from .store import META_STATUS, ArticleStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ArticleStatus, frozenset[ArticleStatus]] = {
    ArticleStatus.NONE: frozenset({ArticleStatus.PENDING}),
    # A stuck pending article can be translated again
    ArticleStatus.PENDING: frozenset(
        {ArticleStatus.PENDING, ArticleStatus.TRANSLATED, ArticleStatus.NONE}
    ),
    ArticleStatus.TRANSLATED: frozenset({ArticleStatus.PENDING, ArticleStatus.COPIED}),
    ArticleStatus.COPIED: frozenset({ArticleStatus.PENDING, ArticleStatus.COPIED}),
}


class InvalidTransitionError(Exception):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, article_id: int, current: ArticleStatus, target: ArticleStatus):
        self.article_id = article_id
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change status of article {article_id} from {current.value} to {target.value}"
        )


class ArticleStateMachine:
    """Reads and writes the status meta of articles in a content store.

    ``none`` is never written; it is represented by a missing status meta.
    """

    def __init__(self, store: ArticleStore):
        self.store = store

    def status(self, article_id: int) -> ArticleStatus:
        raw = self.store.get_meta(article_id, META_STATUS)
        if not raw:
            return ArticleStatus.NONE
        try:
            return ArticleStatus(raw)
        except ValueError:
            logger.warning(f"Unknown status {raw!r} stored for article {article_id}")
            return ArticleStatus.NONE

    def transition(self, article_id: int, target: ArticleStatus) -> ArticleStatus:
        """
        Move an article to a new status.

        Args:
            article_id: Article identifier
            target: Desired status

        Returns:
            The previous status

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        current = self.status(article_id)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(article_id, current, target)

        if target == ArticleStatus.NONE:
            self.store.delete_meta(article_id, META_STATUS)
        else:
            self.store.set_meta(article_id, META_STATUS, target.value)

        if current != target:
            logger.debug(f"Article {article_id}: {current.value} -> {target.value}")
        return current

    def begin_translation(self, article_id: int) -> ArticleStatus:
        return self.transition(article_id, ArticleStatus.PENDING)

    def complete_translation(self, article_id: int) -> ArticleStatus:
        return self.transition(article_id, ArticleStatus.TRANSLATED)

    def fail_translation(self, article_id: int) -> None:
        """Revert a pending article to none. Other statuses are left alone."""
        if self.status(article_id) == ArticleStatus.PENDING:
            self.transition(article_id, ArticleStatus.NONE)

    def mark_copied(self, article_id: int) -> ArticleStatus:
        return self.transition(article_id, ArticleStatus.COPIED)
