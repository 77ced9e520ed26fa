from protectionpro.db.models.user import User, Session
from protectionpro.db.models.content import ContentItem, ContentStatus, PostType
from protectionpro.db.models.options import SiteOption

__all__ = [
    "User",
    "Session",
    "ContentItem",
    "ContentStatus",
    "PostType",
    "SiteOption",
]
