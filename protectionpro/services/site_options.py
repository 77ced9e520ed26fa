import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.config import settings
from protectionpro.db.models.options import SiteOption
from protectionpro.schemas.site_options import (
    OptionsRegistry,
    SiteOptions,
    coerce_value,
    site_essentials,
)

logger = logging.getLogger(__name__)


class SiteOptionsService:
    """Read and overwrite the Site Essentials options record."""

    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[Redis] = None,
        registry: OptionsRegistry = site_essentials,
    ):
        self.db = db
        self.cache = cache
        self.registry = registry

    @property
    def cache_key(self) -> str:
        return f"options:{self.registry.option_name}"

    async def load(self) -> SiteOptions:
        """Load the whole record. Missing or unreadable data reads as empty."""
        cached = await self._cache_get()
        if cached is not None:
            return SiteOptions(cached, self.registry)

        row = await self.db.get(SiteOption, self.registry.option_name)
        values = row.value if row is not None else None
        if values is not None and not isinstance(values, dict):
            logger.warning(
                "Option %s holds a %s, ignoring it",
                self.registry.option_name,
                type(values).__name__,
            )
            values = None

        options = SiteOptions(values, self.registry)
        await self._cache_set(options.as_dict())
        return options

    async def get(self, key: str) -> str:
        """Get a single option value, empty string when unset."""
        options = await self.load()
        return options.get(key)

    async def save(self, submission: Mapping[str, Any]) -> SiteOptions:
        """Replace the record with a form submission.

        Every registered key is written: keys missing from the submission are
        stored as empty strings rather than keeping their previous value.
        Unregistered keys are dropped.
        """
        record = {
            key: coerce_value(submission.get(key, ""))
            for key in self.registry.keys()
        }

        row = await self.db.get(SiteOption, self.registry.option_name)
        if row is None:
            row = SiteOption(name=self.registry.option_name, value=record)
            self.db.add(row)
        else:
            row.value = record
        await self.db.commit()

        filled = sum(1 for value in record.values() if value)
        logger.info(
            "Saved option %s (%d of %d fields filled)",
            self.registry.option_name,
            filled,
            len(record),
        )

        await self._cache_set(record)
        return SiteOptions(record, self.registry)

    async def reset(self) -> SiteOptions:
        """Store an all-empty record."""
        return await self.save({})

    async def _cache_get(self) -> Optional[dict[str, Any]]:
        if self.cache is None:
            return None
        try:
            raw = await self.cache.get(self.cache_key)
        except RedisError as e:
            logger.warning(f"Options cache read failed: {e}")
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    async def _cache_set(self, record: dict[str, str]) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set(
                self.cache_key,
                json.dumps(record),
                ex=settings.options_cache_ttl,
            )
        except RedisError as e:
            logger.warning(f"Options cache write failed: {e}")
