"""Request and response models for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from .article import ArticleStatus


class ErrorResponse(BaseModel):
    """Response model for errors."""
    success: bool = False
    error: str
    error_type: str


class TranslationResult(BaseModel):
    """Outcome of a translate or save action."""
    success: bool = Field(..., description="Whether the action succeeded")
    message: str = Field(..., description="User-facing message")
    error_type: str | None = Field(None, description="Error classification when the action failed")
    review_url: str | None = Field(None, description="Where the stored translation can be reviewed")

    @classmethod
    def failure(cls, message: str, error_type: str) -> "TranslationResult":
        return cls(success=False, message=message, error_type=error_type)


class ArticleUpsertRequest(BaseModel):
    """Article data pushed from the content store."""
    title: str = Field("", description="Original title")
    content: str = Field("", description="Rendered original HTML body")
    post_type: str = Field("post", description="Content type")
    date: datetime | None = Field(None, description="Publication date")


class SaveTranslationRequest(BaseModel):
    """Edited translation submitted from the review screen."""
    title: str = Field("", description="Translated title")
    content: str = Field("", description="Translated HTML; re-sanitized before storing")


class ArticleSummary(BaseModel):
    """One row of the article overview."""
    id: int = Field(..., description="Article identifier")
    title: str = Field(..., description="Original title")
    date: datetime | None = Field(None, description="Publication date")
    status: ArticleStatus = Field(..., description="Translation status")


class MarkdownResponse(BaseModel):
    """Markdown export of a translation."""
    success: bool = True
    markdown: str = Field(..., description="'# Title' line followed by the Markdown body")


class StatusResponse(BaseModel):
    """Current status of an article."""
    success: bool = True
    article_id: int = Field(..., description="Article identifier")
    status: ArticleStatus = Field(..., description="Translation status")


class ModelListResponse(BaseModel):
    """Models offered by the provider, as shown on the settings screen."""
    current: str = Field(..., description="Model currently used for translations")
    models: dict[str, str] = Field(..., description="Model identifier -> display name")
