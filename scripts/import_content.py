#!/usr/bin/env python3
"""Load pages, posts and the Site Essentials record from a JSON file.

Items are matched on type, language and slug, so running the import twice
updates the same rows. When the file carries an ``options`` object it replaces
the whole Site Essentials record.
"""
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from protectionpro.core.redis import close_redis, get_redis
from protectionpro.db.session import async_session_maker
from protectionpro.schemas.content import ContentImportFile
from protectionpro.services.content import ContentService
from protectionpro.services.site_options import SiteOptionsService

logger = logging.getLogger("import_content")


async def import_content(path: Path):
    try:
        data = ContentImportFile.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print(f"Invalid import file {path}:\n{e}")
        sys.exit(1)

    async with async_session_maker() as db:
        content = ContentService(db)
        for item in data.items:
            saved = await content.upsert_item(**item.model_dump())
            logger.info("Imported %s %s/%s", saved.post_type.value, saved.locale, saved.slug)

        if data.options is not None:
            service = SiteOptionsService(db, cache=await get_redis())
            await service.save(data.options)

    await close_redis()
    print(f"Imported {len(data.items)} items from {path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) < 2:
        print("Usage: python import_content.py <file.json>")
        sys.exit(1)

    asyncio.run(import_content(Path(sys.argv[1])))
