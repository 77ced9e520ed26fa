import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from protectionpro.db.base import Base, TimestampMixin


class PostType(str, enum.Enum):
    POST = "post"
    PAGE = "page"
    CASE_STUDY = "case_studies"
    FAQ = "faqs"
    VIDEO = "videos"
    ADVANTAGE = "advantage"


class ContentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ContentItem(Base, TimestampMixin):
    __tablename__ = "content_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    post_type: Mapped[PostType] = mapped_column(
        Enum(PostType, name="post_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status: Mapped[ContentStatus] = mapped_column(
        Enum(ContentStatus, name="content_status", values_callable=lambda e: [m.value for m in e]),
        default=ContentStatus.PUBLISHED,
        nullable=False,
    )
    locale: Mapped[str] = mapped_column(String(16), default="en", nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    content_html: Mapped[str] = mapped_column(Text, default="", nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # Page template name, pages only
    template: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # Custom fields and taxonomy terms
    fields: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    terms: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Items sharing a group are translations of each other
    translation_group: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    menu_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def field(self, name: str, default: Any = "") -> Any:
        """Custom field value, or the default when unset or empty."""
        value = (self.fields or {}).get(name)
        if value is None or value == "":
            return default
        return value

    def has_term(self, *terms: str) -> bool:
        return any(term in (self.terms or []) for term in terms)

    __table_args__ = (
        UniqueConstraint("post_type", "locale", "slug", name="uq_content_type_locale_slug"),
        Index("ix_content_type_locale_status", "post_type", "locale", "status"),
    )
