from typing import Any, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from protectionpro.db.base import Base, TimestampMixin


class SiteOption(Base, TimestampMixin):
    """Named option record; the value is a flat key/value mapping."""
    __tablename__ = "site_options"

    name: Mapped[str] = mapped_column(String(191), primary_key=True)
    value: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
