"""Article and translation endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ..auth import get_api_key
from ..dependencies import TranslatorDep
from ..models.article import Article, TranslationArtifact
from ..models.responses import (
    ArticleSummary,
    ArticleUpsertRequest,
    ErrorResponse,
    MarkdownResponse,
    SaveTranslationRequest,
    StatusResponse,
    TranslationResult,
)
from ..state import InvalidTransitionError
from ..translator import MSG_INVALID_ID, TranslationNotFoundError, Translator
from ..validation import ArticleNotFoundError, InvalidArticleIdError, validate_article_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", dependencies=[Depends(get_api_key)])

# Failed translations -> HTTP status
FAILURE_STATUS = {
    "no_content": 422,
    "missing_api_key": 503,
    "empty_response": 502,
    "rate_limit": 429,
    "timeout": 504,
}


def _error(status_code: int, error: str, error_type: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, error_type=error_type).model_dump(),
    )


def _require_article(translator: Translator, article_id: str) -> Article:
    try:
        return translator.get_article(article_id)
    except InvalidArticleIdError:
        raise _error(400, MSG_INVALID_ID, "invalid_article_id")
    except ArticleNotFoundError as e:
        raise _error(404, str(e), "article_not_found")


@router.get("", response_model=list[ArticleSummary])
async def list_articles(translator: TranslatorDep):
    """Translatable articles with their translation status, newest first."""
    return translator.list_articles()


@router.put("/{article_id}", response_model=Article)
async def upsert_article(article_id: str, body: ArticleUpsertRequest, translator: TranslatorDep):
    """Create or replace an article. An existing translation is kept."""
    try:
        valid_id = validate_article_id(article_id)
    except InvalidArticleIdError:
        raise _error(400, MSG_INVALID_ID, "invalid_article_id")

    article = Article(id=valid_id, **body.model_dump())
    return translator.store.save_article(article)


@router.delete("/{article_id}", status_code=204)
async def delete_article(article_id: str, translator: TranslatorDep):
    """Delete an article together with its translation."""
    try:
        valid_id = validate_article_id(article_id)
    except InvalidArticleIdError:
        raise _error(400, MSG_INVALID_ID, "invalid_article_id")

    if not translator.store.delete_article(valid_id):
        raise _error(404, f"Article {valid_id} not found", "article_not_found")
    return Response(status_code=204)


@router.get("/{article_id}/translation", response_model=TranslationArtifact)
async def get_translation(article_id: str, translator: TranslatorDep):
    article = _require_article(translator, article_id)
    return translator.get_artifact(article.id)


@router.put("/{article_id}/translation", response_model=TranslationResult)
async def save_translation(
    article_id: str, body: SaveTranslationRequest, translator: TranslatorDep
):
    """Store an edited translation; the HTML is sanitized again."""
    article = _require_article(translator, article_id)
    return translator.save_edited(article.id, body.title, body.content)


@router.post("/{article_id}/translate", response_model=TranslationResult)
async def translate_article(article_id: str, translator: TranslatorDep):
    """
    Translate an article with the configured AI model.

    Failures are returned as ErrorResponse with the user-facing message;
    provider details only go to the log.
    """
    article = _require_article(translator, article_id)
    result = await translator.translate(article.id)
    if not result.success:
        raise _error(
            FAILURE_STATUS.get(result.error_type, 502),
            result.message,
            result.error_type or "translation_failed",
        )
    return result


@router.post("/{article_id}/markdown", response_model=MarkdownResponse)
async def copy_markdown(article_id: str, translator: TranslatorDep):
    article = _require_article(translator, article_id)
    try:
        markdown = translator.copy_as_markdown(article.id)
    except TranslationNotFoundError as e:
        raise _error(404, str(e), "translation_not_found")
    return MarkdownResponse(markdown=markdown)


@router.post("/{article_id}/copied", response_model=StatusResponse)
async def mark_copied(article_id: str, translator: TranslatorDep):
    """Confirm that the Markdown was copied to Medium."""
    article = _require_article(translator, article_id)
    try:
        status = translator.mark_copied(article.id)
    except InvalidTransitionError as e:
        raise _error(409, str(e), "invalid_transition")
    return StatusResponse(article_id=article.id, status=status)
