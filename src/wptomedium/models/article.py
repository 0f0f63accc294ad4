"""Pydantic models for articles and their translations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ArticleStatus(str, Enum):
    """Translation status of an article."""

    NONE = "none"
    PENDING = "pending"
    TRANSLATED = "translated"
    COPIED = "copied"


class Article(BaseModel):
    """A post as delivered by the content store."""

    id: int = Field(..., gt=0, description="Article identifier")
    title: str = Field("", description="Original (German) title")
    content: str = Field("", description="Rendered original HTML body")
    post_type: str = Field("post", description="Content type; only 'post' can be translated")
    date: datetime | None = Field(None, description="Publication date")


class TranslationArtifact(BaseModel):
    """Persisted translation of one article."""

    article_id: int = Field(..., description="Article identifier")
    translated_title: str = Field("", description="Translated title (plain text)")
    translated_html: str = Field("", description="Translated body, Medium-sanitized HTML")
    status: ArticleStatus = Field(ArticleStatus.NONE, description="Current translation status")


@dataclass(frozen=True)
class PromptRequest:
    """One translation request to the AI provider. Built per call, never stored."""

    system_prompt: str
    user_content: str
    max_tokens: int
    temperature: float


@dataclass(frozen=True)
class ParsedResponse:
    """Title and content extracted from a TITLE:/CONTENT: formatted response."""

    title: str
    content: str
