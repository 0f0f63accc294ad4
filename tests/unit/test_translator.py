"""Tests for the translation workflow."""

import logging
from unittest.mock import AsyncMock

import pytest

from src.wptomedium.ai_client import ProviderError, ProviderErrorKind
from src.wptomedium.cache import CacheStore, MemoryCacheStore
from src.wptomedium.config import AIConfig
from src.wptomedium.model_catalog import ModelCatalog
from src.wptomedium.models.article import ArticleStatus
from src.wptomedium.state import InvalidTransitionError
from src.wptomedium.store import META_STATUS, META_TRANSLATED_TITLE, META_TRANSLATION
from src.wptomedium.translator import (
    MSG_EMPTY_RESPONSE,
    MSG_INVALID_ID,
    MSG_NO_CONTENT,
    MSG_TRANSLATED,
    OUTPUT_FORMAT_FOOTER,
    SAFE_MAX_TOKENS,
    SAFE_TEMPERATURE,
    USER_MESSAGES,
    TranslationNotFoundError,
    Translator,
)


@pytest.mark.unit
class TestPromptConstruction:
    def test_system_prompt_has_format_footer(self, translator, ai_config):
        prompt = translator.build_system_prompt()
        assert prompt.startswith(ai_config.system_prompt)
        assert prompt.endswith(OUTPUT_FORMAT_FOOTER)
        assert "TITLE:" in prompt
        assert "CONTENT:" in prompt

    def test_request_uses_normalized_content(self, translator, article_store):
        article = article_store.get_article(1)
        request = translator.build_request(article, translator.prepare_content(article))

        assert request.user_content.startswith("Original Title: Hallo Welt\n\nOriginal Content:\n")
        assert "<h2>Abschnitt</h2>" in request.user_content
        assert "wp:paragraph" not in request.user_content
        assert 'class="intro"' not in request.user_content
        assert request.max_tokens == 4096
        assert request.temperature == 0.3


@pytest.mark.unit
class TestTranslate:
    @pytest.mark.asyncio
    async def test_successful_translation(self, translator, article_store, mock_ai_client):
        result = await translator.translate(1)

        assert result.success is True
        assert result.message == MSG_TRANSLATED
        assert result.review_url == "/articles/1/translation"
        assert article_store.get_meta(1, META_TRANSLATED_TITLE) == "Hello World"
        assert (
            article_store.get_meta(1, META_TRANSLATION)
            == "<p>This is a <strong>translated</strong> post.</p>"
        )
        assert translator.states.status(1) == ArticleStatus.TRANSLATED

        mock_ai_client.create_message.assert_awaited_once()
        kwargs = mock_ai_client.create_message.call_args.kwargs
        assert kwargs["api_key"] == "test-ai-key"
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 4096
        assert kwargs["temperature"] == 0.3
        assert kwargs["system"].endswith(OUTPUT_FORMAT_FOOTER)
        assert kwargs["messages"][0]["role"] == "user"
        assert "Hallo Welt" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_status_is_pending_during_request(self, translator, article_store, mock_ai_client):
        seen = []

        async def capture(**kwargs):
            seen.append(article_store.get_meta(1, META_STATUS))
            return "TITLE: T\nCONTENT:\n<p>x</p>"

        mock_ai_client.create_message.side_effect = capture
        await translator.translate(1)

        assert seen == ["pending"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("article_id", [0, -1, "abc", None, 999, 2])
    async def test_invalid_article_id(self, translator, article_store, mock_ai_client, article_id):
        result = await translator.translate(article_id)

        assert result.success is False
        assert result.message == MSG_INVALID_ID
        mock_ai_client.create_message.assert_not_awaited()
        assert article_store.get_meta(2, META_STATUS) is None

    @pytest.mark.asyncio
    async def test_empty_content(self, translator, mock_ai_client):
        result = await translator.translate(3)

        assert result.success is False
        assert result.message == MSG_NO_CONTENT
        assert translator.states.status(3) == ArticleStatus.NONE
        mock_ai_client.create_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, article_store, mock_ai_client):
        translator = Translator(AIConfig(api_key=None), article_store, mock_ai_client)

        result = await translator.translate(1)

        assert result.success is False
        assert "API key" in result.message
        assert translator.states.status(1) == ArticleStatus.NONE
        mock_ai_client.create_message.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind",
        [
            ProviderErrorKind.AUTH,
            ProviderErrorKind.RATE_LIMIT,
            ProviderErrorKind.SERVER_ERROR,
            ProviderErrorKind.TIMEOUT,
            ProviderErrorKind.CONNECTION,
        ],
    )
    async def test_provider_error_reverts_status(self, translator, article_store, mock_ai_client, kind):
        mock_ai_client.create_message.side_effect = ProviderError(kind, "secret provider text")

        result = await translator.translate(1)

        assert result.success is False
        assert result.message == USER_MESSAGES[kind]
        assert result.error_type == kind.value
        assert "secret provider text" not in result.message
        assert translator.states.status(1) == ArticleStatus.NONE
        assert article_store.get_meta(1, META_TRANSLATION) is None
        assert mock_ai_client.create_message.await_count == 1

    @pytest.mark.asyncio
    async def test_provider_text_only_logged_when_verbose(self, article_store, mock_ai_client, caplog):
        mock_ai_client.create_message.side_effect = ProviderError(
            ProviderErrorKind.AUTH, "invalid x-api-key", status_code=401
        )
        quiet = Translator(AIConfig(api_key="k"), article_store, mock_ai_client)
        verbose = Translator(AIConfig(api_key="k", verbose_errors=True), article_store, mock_ai_client)

        with caplog.at_level(logging.WARNING):
            await quiet.translate(1)
        assert "invalid x-api-key" not in caplog.text
        assert "auth" in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING):
            await verbose.translate(1)
        assert "invalid x-api-key" in caplog.text

    @pytest.mark.asyncio
    async def test_bad_request_retried_with_safe_defaults(self, article_store, mock_ai_client):
        config = AIConfig(api_key="k", model="claude-test", max_tokens=64000, temperature=0.9)
        translator = Translator(config, article_store, mock_ai_client)
        mock_ai_client.create_message.side_effect = [
            ProviderError(ProviderErrorKind.BAD_REQUEST, "max_tokens too large"),
            "TITLE: Hello\nCONTENT:\n<p>Body</p>",
        ]

        result = await translator.translate(1)

        assert result.success is True
        assert mock_ai_client.create_message.await_count == 2
        first, second = mock_ai_client.create_message.call_args_list
        assert first.kwargs["max_tokens"] == 64000
        assert first.kwargs["temperature"] == 0.9
        assert second.kwargs["max_tokens"] == SAFE_MAX_TOKENS
        assert second.kwargs["temperature"] == SAFE_TEMPERATURE

    @pytest.mark.asyncio
    async def test_bad_request_retried_only_once(self, translator, mock_ai_client):
        mock_ai_client.create_message.side_effect = ProviderError(
            ProviderErrorKind.BAD_REQUEST, "still bad"
        )

        result = await translator.translate(1)

        assert result.success is False
        assert result.message == USER_MESSAGES[ProviderErrorKind.BAD_REQUEST]
        assert mock_ai_client.create_message.await_count == 2
        assert translator.states.status(1) == ArticleStatus.NONE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            "I cannot translate this.",
            "TITLE: Hello\n\nThe content follows.",
            "TITLE:\nCONTENT:\n<p>Body</p>",
            "TITLE: Hello\nCONTENT:\n",
            "TITLE: Hello\nCONTENT:\n<p></p><script>x()</script>",
            "",
        ],
    )
    async def test_empty_or_malformed_response(self, translator, article_store, mock_ai_client, response):
        mock_ai_client.create_message.return_value = response

        result = await translator.translate(1)

        assert result.success is False
        assert result.message == MSG_EMPTY_RESPONSE
        assert article_store.get_meta(1, META_TRANSLATION) is None
        assert article_store.get_meta(1, META_TRANSLATED_TITLE) is None
        assert translator.states.status(1) == ArticleStatus.NONE

    @pytest.mark.asyncio
    async def test_response_is_sanitized(self, translator, article_store, mock_ai_client):
        mock_ai_client.create_message.return_value = (
            "TITLE: <b>Hello</b>\n"
            "CONTENT:\n"
            '<p onclick="x()">Body</p><script>steal()</script><div>more</div>'
        )

        await translator.translate(1)

        assert article_store.get_meta(1, META_TRANSLATED_TITLE) == "Hello"
        assert article_store.get_meta(1, META_TRANSLATION) == "<p>Body</p>more"

    @pytest.mark.asyncio
    async def test_unexpected_error_reverts_and_propagates(self, translator, mock_ai_client):
        mock_ai_client.create_message.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await translator.translate(1)

        assert translator.states.status(1) == ArticleStatus.NONE

    @pytest.mark.asyncio
    async def test_retranslate_copied_article(self, translator, article_store):
        article_store.set_meta(1, META_STATUS, "copied")

        result = await translator.translate(1)

        assert result.success is True
        assert translator.states.status(1) == ArticleStatus.TRANSLATED


@pytest.mark.unit
class TestModelResolution:
    @pytest.fixture
    def catalog(self, mock_ai_client):
        return ModelCatalog(mock_ai_client, MemoryCacheStore())

    @pytest.mark.asyncio
    async def test_configured_model_available(self, article_store, mock_ai_client, catalog):
        config = AIConfig(api_key="k", model="claude-other")
        translator = Translator(config, article_store, mock_ai_client, catalog=catalog)

        await translator.translate(1)

        assert mock_ai_client.create_message.call_args.kwargs["model"] == "claude-other"
        assert config.model == "claude-other"

    @pytest.mark.asyncio
    async def test_unavailable_model_falls_back_and_persists(self, article_store, mock_ai_client, catalog):
        config = AIConfig(api_key="k", model="claude-retired")
        translator = Translator(config, article_store, mock_ai_client, catalog=catalog)

        await translator.translate(1)

        assert mock_ai_client.create_message.call_args.kwargs["model"] == "claude-test"
        assert config.model == "claude-test"

    @pytest.mark.asyncio
    async def test_model_list_failure_keeps_configured_model(self, article_store, mock_ai_client, catalog):
        mock_ai_client.list_models.side_effect = ProviderError(ProviderErrorKind.CONNECTION, "down")
        config = AIConfig(api_key="k", model="claude-retired")
        translator = Translator(config, article_store, mock_ai_client, catalog=catalog)

        result = await translator.translate(1)

        assert result.success is True
        assert mock_ai_client.create_message.call_args.kwargs["model"] == "claude-retired"

    @pytest.mark.asyncio
    async def test_cache_outage_does_not_block_translation(self, article_store, mock_ai_client):
        cache = AsyncMock(spec=CacheStore)
        cache.get.side_effect = ConnectionError("redis down")
        cache.set.side_effect = ConnectionError("redis down")
        config = AIConfig(api_key="k", model="claude-other")
        translator = Translator(
            config, article_store, mock_ai_client, catalog=ModelCatalog(mock_ai_client, cache)
        )

        result = await translator.translate(1)

        assert result.success is True
        assert mock_ai_client.create_message.call_args.kwargs["model"] == "claude-other"
        assert translator.states.status(1) == ArticleStatus.TRANSLATED

    @pytest.mark.asyncio
    async def test_available_models(self, article_store, mock_ai_client, catalog):
        translator = Translator(AIConfig(api_key="k"), article_store, mock_ai_client, catalog=catalog)
        assert await translator.available_models() == {
            "claude-test": "Claude Test",
            "claude-other": "Claude Other",
        }

    @pytest.mark.asyncio
    async def test_available_models_without_key(self, article_store, mock_ai_client, catalog):
        translator = Translator(AIConfig(api_key=None), article_store, mock_ai_client, catalog=catalog)
        assert await translator.available_models() == {}
        mock_ai_client.list_models.assert_not_awaited()


@pytest.mark.unit
class TestSaveAndExport:
    def test_save_edited_sanitizes(self, translator, article_store):
        article_store.set_meta(1, META_STATUS, "translated")

        result = translator.save_edited(
            1, "  <i>Edited</i>\n title ", '<p style="x">New</p><script>bad()</script>'
        )

        assert result.success is True
        assert article_store.get_meta(1, META_TRANSLATED_TITLE) == "Edited title"
        assert article_store.get_meta(1, META_TRANSLATION) == "<p>New</p>"
        assert translator.states.status(1) == ArticleStatus.TRANSLATED

    def test_save_edited_invalid_id(self, translator, article_store):
        result = translator.save_edited("x", "T", "<p>x</p>")
        assert result.success is False
        assert result.message == MSG_INVALID_ID

    @pytest.mark.asyncio
    async def test_copy_as_markdown(self, translator):
        await translator.translate(1)

        markdown = translator.copy_as_markdown(1)

        assert markdown == "# Hello World\n\nThis is a **translated** post."
        assert translator.states.status(1) == ArticleStatus.TRANSLATED

    def test_copy_as_markdown_without_translation(self, translator):
        with pytest.raises(TranslationNotFoundError):
            translator.copy_as_markdown(1)

    @pytest.mark.asyncio
    async def test_mark_copied(self, translator):
        await translator.translate(1)
        assert translator.mark_copied(1) == ArticleStatus.COPIED
        assert translator.mark_copied(1) == ArticleStatus.COPIED

    def test_mark_copied_requires_translation(self, translator):
        with pytest.raises(InvalidTransitionError):
            translator.mark_copied(1)
        assert translator.states.status(1) == ArticleStatus.NONE

    def test_list_articles_with_status(self, translator, article_store):
        article_store.set_meta(1, META_STATUS, "translated")

        summaries = translator.list_articles()

        assert [(s.id, s.status) for s in summaries] == [
            (3, ArticleStatus.NONE),
            (1, ArticleStatus.TRANSLATED),
        ]
