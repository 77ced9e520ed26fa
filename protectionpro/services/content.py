import html
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from html.parser import HTMLParser
from typing import Any, Optional

import bleach
import markdown
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.db.models.content import ContentItem, ContentStatus, PostType

# Tags kept by the landing page meta/script fields
HEAD_TAGS = {"meta", "title", "style", "script", "link"}


def slugify(text: str) -> str:
    """Convert text to URL-friendly slug."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "-", text)
    return text.strip("-")


def render_markdown(content: str) -> str:
    """Render markdown to HTML and sanitize."""
    rendered = markdown.markdown(
        content,
        extensions=["fenced_code", "tables", "nl2br"],
    )
    allowed_tags = [
        "p", "br", "strong", "em", "u", "s", "code", "pre",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "blockquote",
        "a", "img", "table", "thead", "tbody", "tr", "th", "td",
        "figure", "figcaption", "video", "source", "iframe",
    ]
    allowed_attrs = {
        "a": ["href", "title", "target"],
        "img": ["src", "alt", "title", "class"],
        "video": ["src", "controls", "class"],
        "source": ["src", "type"],
        "iframe": ["src", "width", "height", "allowfullscreen"],
        "figure": ["class"],
    }
    return bleach.clean(rendered, tags=allowed_tags, attributes=allowed_attrs)


class TagFilter(HTMLParser):
    """Drop tags outside an allow-list and copy everything else through as written.

    Kept start tags are emitted from the source text, so attribute values are
    untouched, and script/style bodies arrive here unparsed. Comments,
    doctypes and processing instructions are dropped.
    """

    def __init__(self, allowed: Iterable[str]):
        super().__init__(convert_charrefs=False)
        self.allowed = {tag.lower() for tag in allowed}
        self.parts: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in self.allowed:
            self.parts.append(self.get_starttag_text())

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag in self.allowed:
            self.parts.append(f"</{tag}>")

    def handle_data(self, data):
        self.parts.append(data)

    def handle_entityref(self, name):
        self.parts.append(f"&{name};")

    def handle_charref(self, name):
        self.parts.append(f"&#{name};")


def strip_tags(content: str, allowed: Iterable[str] = ()) -> str:
    """Remove every tag not in ``allowed``, leaving kept markup as written."""
    parser = TagFilter(allowed)
    parser.feed(content or "")
    parser.close()
    return "".join(parser.parts)


def trim_words(content: str, num_words: int = 20, more: str = "...") -> str:
    """Plain-text excerpt of at most ``num_words`` words.

    ``more`` is appended only when words were cut.
    """
    # bleach escapes what is left; templates escape the excerpt again
    text = html.unescape(bleach.clean(content or "", tags=set(), strip=True))
    words = text.split()
    if len(words) <= num_words:
        return " ".join(words)
    return " ".join(words[:num_words]) + more


class ContentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _published(self, post_type: PostType, locale: str):
        return select(ContentItem).where(
            ContentItem.post_type == post_type,
            ContentItem.locale == locale,
            ContentItem.status == ContentStatus.PUBLISHED,
        )

    async def get_item(
        self, post_type: PostType, slug: str, locale: str
    ) -> Optional[ContentItem]:
        """Get a published item by type, slug and locale."""
        result = await self.db.execute(
            self._published(post_type, locale).where(ContentItem.slug == slug)
        )
        return result.scalar_one_or_none()

    async def get_page(self, slug: str, locale: str) -> Optional[ContentItem]:
        return await self.get_item(PostType.PAGE, slug, locale)

    async def list_items(
        self,
        post_type: PostType,
        locale: str,
        terms: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> list[ContentItem]:
        """List published items of a type, optionally filtered by any of ``terms``.

        Term filtering happens in Python since terms are a JSON list.
        """
        order = ContentItem.published_at.desc() if newest_first else ContentItem.published_at.asc()
        query = self._published(post_type, locale).order_by(
            ContentItem.menu_order.asc(), order
        )
        result = await self.db.execute(query)
        items = list(result.scalars().all())

        if terms is not None:
            wanted = list(terms)
            items = [item for item in items if item.has_term(*wanted)]
        if limit is not None:
            items = items[:limit]
        return items

    async def list_posts(
        self,
        locale: str,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[ContentItem], int]:
        """Paginated news posts, newest first."""
        query = self._published(PostType.POST, locale)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            query.order_by(ContentItem.published_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def search(
        self,
        post_type: PostType,
        query: str,
        locale: str,
    ) -> list[ContentItem]:
        """Case-insensitive title/content search, oldest first."""
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            self._published(post_type, locale)
            .where(
                or_(
                    ContentItem.title.ilike(pattern),
                    ContentItem.content_html.ilike(pattern),
                )
            )
            .order_by(ContentItem.published_at.asc())
        )
        return list(result.scalars().all())

    async def get_translations(self, item: ContentItem) -> list[ContentItem]:
        """Published items in the same translation group, any locale."""
        if not item.translation_group:
            return [item]
        result = await self.db.execute(
            select(ContentItem).where(
                ContentItem.translation_group == item.translation_group,
                ContentItem.status == ContentStatus.PUBLISHED,
            )
        )
        return list(result.scalars().all())

    async def create_item(
        self,
        post_type: PostType,
        title: str,
        slug: Optional[str] = None,
        locale: str = "en",
        content_html: Optional[str] = None,
        content_md: Optional[str] = None,
        fields: Optional[dict[str, Any]] = None,
        terms: Optional[list[str]] = None,
        status: ContentStatus = ContentStatus.PUBLISHED,
        published_at: Optional[datetime] = None,
        **extra: Any,
    ) -> ContentItem:
        """Create an item. Markdown content is rendered and sanitized."""
        if content_html is None:
            content_html = render_markdown(content_md) if content_md else ""

        if published_at is None and status == ContentStatus.PUBLISHED:
            published_at = datetime.now(timezone.utc)

        item = ContentItem(
            post_type=post_type,
            title=title,
            slug=slug or slugify(title),
            locale=locale,
            content_html=content_html,
            fields=fields or {},
            terms=terms or [],
            status=status,
            published_at=published_at,
            **extra,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def upsert_item(self, **data: Any) -> ContentItem:
        """Create an item, or overwrite the one with the same type/locale/slug."""
        post_type = data["post_type"]
        locale = data.get("locale", "en")
        slug = data.get("slug") or slugify(data["title"])
        result = await self.db.execute(
            select(ContentItem).where(
                ContentItem.post_type == post_type,
                ContentItem.locale == locale,
                ContentItem.slug == slug,
            )
        )
        existing = result.scalar_one_or_none()
        if existing is None:
            return await self.create_item(**data)

        content_md = data.pop("content_md", None)
        if data.get("content_html") is None:
            data["content_html"] = render_markdown(content_md) if content_md else ""
        for name, value in data.items():
            if value is not None:
                setattr(existing, name, value)
        await self.db.commit()
        await self.db.refresh(existing)
        return existing
