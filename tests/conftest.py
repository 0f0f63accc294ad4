"""Shared test fixtures and configuration."""

import os
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from src.wptomedium.ai_client import AIClient
from src.wptomedium.config import AIConfig, reload_settings
from src.wptomedium.main import app
from src.wptomedium.models.article import Article
from src.wptomedium.store import ArticleStore
from src.wptomedium.translator import Translator

AI_RESPONSE = (
    "TITLE: Hello World\n\n"
    "CONTENT:\n"
    "<p>This is a <strong>translated</strong> post.</p>"
)


@pytest.fixture
def article_store():
    """Store with a post, a page and an empty post."""
    store = ArticleStore()
    store.save_article(
        Article(
            id=1,
            title="Hallo Welt",
            content=(
                "<!-- wp:paragraph -->"
                '<p class="intro">Dies ist ein <strong>Beitrag</strong>.</p>'
                "<!-- /wp:paragraph -->"
                "<h3>Abschnitt</h3>"
            ),
            date=datetime(2024, 5, 1, 12, 0),
        )
    )
    store.save_article(
        Article(id=2, title="Impressum", content="<p>Seite</p>", post_type="page")
    )
    store.save_article(
        Article(
            id=3,
            title="Leer",
            content="<!-- wp:paragraph --><!-- /wp:paragraph -->",
            date=datetime(2024, 6, 1, 12, 0),
        )
    )
    return store


@pytest.fixture
def ai_config():
    """AI configuration with a test key; never read from the environment."""
    return AIConfig(api_key="test-ai-key", model="claude-test", max_tokens=4096, temperature=0.3)


@pytest.fixture
def mock_ai_client():
    """Fixture to mock the AI client with a well-formed response."""
    client = AsyncMock(spec=AIClient)
    client.create_message.return_value = AI_RESPONSE
    client.list_models.return_value = {
        "claude-test": "Claude Test",
        "claude-other": "Claude Other",
    }
    return client


@pytest.fixture
def translator(ai_config, article_store, mock_ai_client):
    return Translator(ai_config, article_store, mock_ai_client)


@pytest.fixture
def api_client(env_no_auth):
    """FastAPI test client with lifespan resources started."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def app_translator(api_client, ai_config, article_store, mock_ai_client):
    """Replace the application's translator with one backed by test doubles."""
    original = app.state.translator
    app.state.translator = Translator(ai_config, article_store, mock_ai_client)
    yield app.state.translator
    app.state.translator = original


@pytest.fixture
def auth_headers():
    """Fixture to provide valid authentication headers."""
    return {"Authorization": "Bearer test-key"}


@pytest.fixture
def api_key_headers():
    """Fixture to provide valid API key headers."""
    return {"X-API-Key": "test-key"}


@pytest.fixture
def env_no_auth():
    """Fixture to clear authentication environment variables."""
    with patch.dict(os.environ, {}, clear=True):
        reload_settings()
        yield
    reload_settings()


@pytest.fixture
def env_with_auth():
    """Fixture to set authentication environment variables."""
    with patch.dict(os.environ, {"WPTOMEDIUM_KEY": "test-key"}, clear=True):
        reload_settings()
        yield
    reload_settings()


@pytest.fixture
def block_editor_html():
    """Rendered block-editor post body with the usual markup noise."""
    return """<!-- wp:heading {"level":3} -->
<h3 class="wp-block-heading">Unsere Reise</h3>
<!-- /wp:heading -->
<!-- wp:paragraph -->
<p class="has-text-color" style="color:#333">Wir waren in <a href="https://example.com/berlin" target="_blank" rel="noopener">Berlin</a>.</p>
<!-- /wp:paragraph -->
<!-- wp:table -->
<figure class="wp-block-table"><table><thead><tr><th>Stadt</th><th>Tage</th></tr></thead><tbody><tr><td><strong>Berlin</strong></td><td>3</td></tr></tbody></table></figure>
<!-- /wp:table -->
<!-- wp:gallery -->
<figure class="wp-block-gallery has-nested-images columns-2"><figure class="wp-block-image"><img src="https://example.com/a.jpg" alt="Tor" class="wp-image-1"/><figcaption>Das Tor</figcaption></figure><figure class="wp-block-image"><img src="https://example.com/b.jpg" alt="Dom"/></figure></figure>
<!-- /wp:gallery -->
<script>trackVisit();</script>
"""
