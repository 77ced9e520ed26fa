from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from protectionpro.db.models.content import ContentStatus, PostType


class ContentImport(BaseModel):
    """One content item as read from an import file."""

    post_type: PostType = PostType.PAGE
    status: ContentStatus = ContentStatus.PUBLISHED
    locale: str = "en"
    slug: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=256)
    content_html: Optional[str] = None
    content_md: Optional[str] = None
    excerpt: Optional[str] = Field(None, max_length=512)
    template: Optional[str] = None
    thumbnail_url: Optional[str] = None
    fields: dict[str, Any] = {}
    terms: list[str] = []
    translation_group: Optional[str] = None
    menu_order: int = 0
    published_at: Optional[datetime] = None


class ContentImportFile(BaseModel):
    """Import file layout: content items plus an optional options record."""

    items: list[ContentImport] = []
    options: Optional[dict[str, str]] = None
