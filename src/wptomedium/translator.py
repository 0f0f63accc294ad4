"""Translation workflow: prompt construction, AI call, response parsing and persistence."""

import logging
import re

from .ai_client import AIClient, ProviderError, ProviderErrorKind
from .config import AIConfig
from .logging_config import log_with_context
from .model_catalog import ModelCatalog
from .models.article import (
    Article,
    ArticleStatus,
    ParsedResponse,
    PromptRequest,
    TranslationArtifact,
)
from .models.responses import ArticleSummary, TranslationResult
from .state import ArticleStateMachine
from .store import META_TRANSLATED_TITLE, META_TRANSLATION, ArticleStore
from .transformers import html_to_plaintext, normalize, sanitize, sanitize_text, to_markdown
from .validation import (
    ArticleNotFoundError,
    InvalidArticleIdError,
    is_translatable_post_type,
    validate_article_id,
)

logger = logging.getLogger(__name__)

OUTPUT_FORMAT_FOOTER = (
    "Return ONLY the translated content in this exact format:\n\n"
    "TITLE: [translated title]\n\n"
    "CONTENT:\n"
    "[translated HTML content]"
)

# Used for the single retry after a bad_request response
SAFE_MAX_TOKENS = 4096
SAFE_TEMPERATURE = 0.3

MSG_INVALID_ID = "Invalid article ID."
MSG_NO_CONTENT = "Post has no content."
MSG_NO_API_KEY = "No API key configured. Please add your API key in the settings."
MSG_EMPTY_RESPONSE = "AI returned an empty response."
MSG_TRANSLATED = "Translation complete."
MSG_SAVED = "Translation saved."

USER_MESSAGES: dict[ProviderErrorKind, str] = {
    ProviderErrorKind.AUTH: "Authentication failed. Please check your API key.",
    ProviderErrorKind.PERMISSION: "The API key is not allowed to use this model.",
    ProviderErrorKind.RATE_LIMIT: "Rate limit reached. Please wait a moment and try again.",
    ProviderErrorKind.BAD_REQUEST: "The translation request was rejected. Please check the model settings.",
    ProviderErrorKind.NOT_FOUND: "The selected model was not found. Please choose another model.",
    ProviderErrorKind.CONFLICT: "The request conflicted with another request. Please try again.",
    ProviderErrorKind.UNPROCESSABLE: "The request could not be processed. Please try again.",
    ProviderErrorKind.SERVER_ERROR: "The AI service is currently unavailable. Please try again later.",
    ProviderErrorKind.TIMEOUT: "The request timed out. Please try again.",
    ProviderErrorKind.CONNECTION: "Could not connect to the AI service. Please check your connection.",
    ProviderErrorKind.UNKNOWN: "Translation failed due to an unexpected error.",
}

_CONTENT_MARKER = re.compile(r"CONTENT:[ \t]*\n?", re.IGNORECASE)
_TITLE_LINE = re.compile(r"TITLE:[ \t]*(.*)", re.IGNORECASE)
_CODE_FENCE = re.compile(r"^```[a-zA-Z]*[ \t]*\n(.*?)\n?```$", re.DOTALL)


class TranslationNotFoundError(Exception):
    """Raised when an article has no stored translation."""

    pass


def provider_error_message(error: ProviderError) -> str:
    """User-facing sentence for a provider failure; never contains provider text."""
    return USER_MESSAGES.get(error.kind, USER_MESSAGES[ProviderErrorKind.UNKNOWN])


def parse_response(text: str | None) -> ParsedResponse:
    """
    Split a TITLE:/CONTENT: formatted model response.

    The content is everything after the first CONTENT: marker, wherever it
    appears; the title runs from the TITLE: marker before it to the end of
    that line or to the CONTENT: marker. Without a CONTENT: marker both
    parts are empty.
    """
    if not text:
        return ParsedResponse(title="", content="")

    marker = _CONTENT_MARKER.search(text)
    if marker is None:
        return ParsedResponse(title="", content="")

    head = text[: marker.start()]
    content = text[marker.end():].strip()

    fenced = _CODE_FENCE.match(content)
    if fenced:
        content = fenced.group(1).strip()

    title_match = _TITLE_LINE.search(head)
    title = title_match.group(1).strip() if title_match else ""

    return ParsedResponse(title=title, content=content)


class Translator:
    """Runs translations for articles of one content store."""

    def __init__(
        self,
        config: AIConfig,
        store: ArticleStore,
        client: AIClient,
        catalog: ModelCatalog | None = None,
    ):
        self.config = config
        self.store = store
        self.client = client
        self.catalog = catalog
        self.states = ArticleStateMachine(store)

    def get_article(self, article_id: object) -> Article:
        """
        Look up a translatable article.

        Raises:
            InvalidArticleIdError: If the identifier is malformed
            ArticleNotFoundError: If no post exists with this identifier
        """
        valid_id = validate_article_id(article_id)
        article = self.store.get_article(valid_id)
        if article is None or not is_translatable_post_type(article.post_type):
            raise ArticleNotFoundError(f"Article {valid_id} not found")
        return article

    def prepare_content(self, article: Article) -> str:
        return normalize(article.content)

    def build_system_prompt(self) -> str:
        return f"{self.config.system_prompt.strip()}\n\n{OUTPUT_FORMAT_FOOTER}"

    def build_user_prompt(self, title: str, content: str) -> str:
        return f"Original Title: {title}\n\nOriginal Content:\n{content}"

    def build_request(self, article: Article, content: str) -> PromptRequest:
        return PromptRequest(
            system_prompt=self.build_system_prompt(),
            user_content=self.build_user_prompt(article.title, content),
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

    async def resolve_model(self) -> str:
        if self.catalog is None:
            return self.config.model
        return await self.catalog.resolve(self.config)

    async def _generate(self, request: PromptRequest, model: str) -> str:
        kwargs = {
            "api_key": self.config.api_key,
            "system": request.system_prompt,
            "messages": [{"role": "user", "content": request.user_content}],
            "model": model,
        }
        try:
            return await self.client.create_message(
                max_tokens=request.max_tokens, temperature=request.temperature, **kwargs
            )
        except ProviderError as e:
            if e.kind != ProviderErrorKind.BAD_REQUEST:
                raise
            logger.warning(
                f"Bad request with max_tokens={request.max_tokens}, "
                f"temperature={request.temperature}; retrying with safe defaults"
            )
            return await self.client.create_message(
                max_tokens=SAFE_MAX_TOKENS, temperature=SAFE_TEMPERATURE, **kwargs
            )

    def _log_provider_error(self, article_id: int, error: ProviderError) -> None:
        if self.config.verbose_errors:
            logger.warning(
                f"Translation of article {article_id} failed: {error.kind.value}: {error.message}"
            )
        else:
            logger.warning(
                f"Translation of article {article_id} failed: {error.kind.value}"
                + (f" (HTTP {error.status_code})" if error.status_code else "")
            )

    async def _run(self, article: Article) -> TranslationResult:
        content = self.prepare_content(article)
        if not content:
            return TranslationResult.failure(MSG_NO_CONTENT, "no_content")

        if not self.config.api_key:
            return TranslationResult.failure(MSG_NO_API_KEY, "missing_api_key")

        request = self.build_request(article, content)
        try:
            model = await self.resolve_model()
            raw = await self._generate(request, model)
        except ProviderError as e:
            self._log_provider_error(article.id, e)
            return TranslationResult.failure(provider_error_message(e), e.kind.value)

        parsed = parse_response(raw)
        title = sanitize_text(parsed.title)
        html = sanitize(parsed.content)
        if not title or not html or not html_to_plaintext(html):
            logger.warning(f"Empty or malformed AI response for article {article.id}")
            if self.config.verbose_errors:
                logger.debug(f"Raw response: {raw[:1000]!r}")
            return TranslationResult.failure(MSG_EMPTY_RESPONSE, "empty_response")

        self.store.set_meta(article.id, META_TRANSLATED_TITLE, title)
        self.store.set_meta(article.id, META_TRANSLATION, html)
        self.states.complete_translation(article.id)

        log_with_context(
            logger, logging.INFO, "Translation stored", article_id=article.id, model=model
        )
        return TranslationResult(
            success=True,
            message=MSG_TRANSLATED,
            review_url=f"/articles/{article.id}/translation",
        )

    async def translate(self, article_id: object) -> TranslationResult:
        """
        Translate an article and store the result.

        The article is pending while the request runs; every failure puts
        it back to none.

        Args:
            article_id: Article identifier from the request

        Returns:
            TranslationResult with a user-facing message
        """
        try:
            article = self.get_article(article_id)
        except (InvalidArticleIdError, ArticleNotFoundError):
            return TranslationResult.failure(MSG_INVALID_ID, "invalid_article_id")

        self.states.begin_translation(article.id)
        try:
            result = await self._run(article)
        except Exception:
            logger.exception(f"Unexpected error translating article {article.id}")
            self.states.fail_translation(article.id)
            raise

        if not result.success:
            self.states.fail_translation(article.id)
        return result

    def save_edited(self, article_id: object, title: str, html: str) -> TranslationResult:
        """Store a manually edited translation. The status is not changed."""
        try:
            article = self.get_article(article_id)
        except (InvalidArticleIdError, ArticleNotFoundError):
            return TranslationResult.failure(MSG_INVALID_ID, "invalid_article_id")

        self.store.set_meta(article.id, META_TRANSLATED_TITLE, sanitize_text(title))
        self.store.set_meta(article.id, META_TRANSLATION, sanitize(html))
        logger.info(f"Saved edited translation for article {article.id}")
        return TranslationResult(success=True, message=MSG_SAVED)

    def get_artifact(self, article_id: object) -> TranslationArtifact:
        article = self.get_article(article_id)
        return TranslationArtifact(
            article_id=article.id,
            translated_title=self.store.get_meta(article.id, META_TRANSLATED_TITLE, ""),
            translated_html=self.store.get_meta(article.id, META_TRANSLATION, ""),
            status=self.states.status(article.id),
        )

    def copy_as_markdown(self, article_id: object) -> str:
        """
        Render the stored translation as Markdown with a '# Title' line.

        Raises:
            TranslationNotFoundError: If the article was never translated
        """
        artifact = self.get_artifact(article_id)
        if not artifact.translated_html and not artifact.translated_title:
            raise TranslationNotFoundError(f"Article {artifact.article_id} has no translation")
        return f"# {artifact.translated_title}\n\n{to_markdown(artifact.translated_html)}"

    def mark_copied(self, article_id: object) -> ArticleStatus:
        article = self.get_article(article_id)
        self.states.mark_copied(article.id)
        return ArticleStatus.COPIED

    def list_articles(self) -> list[ArticleSummary]:
        return [
            ArticleSummary(
                id=article.id,
                title=article.title,
                date=article.date,
                status=self.states.status(article.id),
            )
            for article in self.store.list_articles()
        ]

    async def available_models(self, force_refresh: bool = False) -> dict[str, str]:
        """
        Models offered by the provider.

        Returns an empty mapping when no API key is configured or the list
        cannot be fetched.
        """
        if self.catalog is None or not self.config.api_key:
            return {}
        try:
            return await self.catalog.list_models(self.config.api_key, force_refresh=force_refresh)
        except ProviderError as e:
            logger.warning(f"Could not list models: {e.kind.value}")
            return {}
