"""Tests for the options schema and the options store."""
import json

import pytest
from markupsafe import Markup
from redis.exceptions import RedisError

from protectionpro.db.models.options import SiteOption
from protectionpro.schemas.site_options import (
    FieldType,
    OptionsRegistry,
    SiteOptions,
    site_essentials,
)
from protectionpro.services.site_options import SiteOptionsService

ALL_KEYS = [
    "twitter_link", "facebook_link", "gplus_link", "youtube_link", "linkedin_link",
    "webmaster_tools", "gtm_code_head", "gtm_code_body", "ga_code",
    "404_title", "404_body",
    "404_left_button_icon", "404_left_button_text",
    "404_middle_button_icon", "404_middle_button_text",
    "404_right_button_icon", "404_right_button_text",
]


def test_registry_declares_every_key():
    assert site_essentials.keys() == ALL_KEYS
    assert [s.id for s in site_essentials.sections()] == ["social", "google", "404"]


def test_registry_field_types():
    assert site_essentials.field("twitter_link").type is FieldType.TEXT
    assert site_essentials.field("404_title").type is FieldType.TEXT
    assert site_essentials.field("gtm_code_body").type is FieldType.RICH_TEXT
    assert site_essentials.field("404_body").type is FieldType.RICH_TEXT
    assert site_essentials.field("404_left_button_icon").type is FieldType.MARKUP


def test_registry_rejects_duplicates_and_unknown_sections():
    registry = OptionsRegistry("test")
    registry.add_section("main", "Main")
    registry.add_field("main", "a", "A")

    with pytest.raises(ValueError):
        registry.add_field("main", "a", "A again")
    with pytest.raises(ValueError):
        registry.add_field("missing", "b", "B")
    with pytest.raises(ValueError):
        registry.add_section("main", "Main again")


def test_unset_keys_read_as_empty_string():
    options = SiteOptions()
    for key in ALL_KEYS:
        assert options.get(key) == ""
    assert options.get("not_a_key") == ""


def test_non_string_and_unknown_values_are_dropped():
    options = SiteOptions({"twitter_link": 42, "bogus": "x", "ga_code": "<script></script>"})
    assert options.get("twitter_link") == ""
    assert "bogus" not in options
    assert options.get("ga_code") == "<script></script>"


def test_render_escapes_text_fields():
    options = SiteOptions({"404_title": "<b>Oops</b> & more"})
    assert str(options.render("404_title")) == "&lt;b&gt;Oops&lt;/b&gt; &amp; more"


def test_render_decodes_rich_text_fields():
    stored = "&lt;noscript&gt;&lt;iframe src=&quot;x&quot;&gt;&lt;/iframe&gt;&lt;/noscript&gt;"
    rendered = SiteOptions({"gtm_code_body": stored}).render("gtm_code_body")
    assert isinstance(rendered, Markup)
    assert str(rendered) == '<noscript><iframe src="x"></iframe></noscript>'


def test_render_keeps_markup_fields_raw():
    icon = "<i class='fa fa-home' aria-hidden='true'></i>"
    assert str(SiteOptions({"404_left_button_icon": icon}).render("404_left_button_icon")) == icon


async def test_load_without_record_is_empty(db):
    options = await SiteOptionsService(db).load()
    assert options.as_dict() == {key: "" for key in ALL_KEYS}


async def test_save_overwrites_the_whole_record(db):
    service = SiteOptionsService(db)
    await service.save({"twitter_link": "http://twitter.com/example", "ga_code": "<script>ga()</script>"})
    await service.save({"facebook_link": "http://facebook.com/example"})

    options = await service.load()
    assert options.get("facebook_link") == "http://facebook.com/example"
    assert options.get("twitter_link") == ""
    assert options.get("ga_code") == ""


async def test_save_empty_form_clears_every_key(db):
    service = SiteOptionsService(db)
    await service.save({key: "filled" for key in ALL_KEYS})
    await service.save({key: "" for key in ALL_KEYS})

    options = await service.load()
    assert all(options.get(key) == "" for key in ALL_KEYS)


async def test_save_drops_unregistered_keys(db):
    service = SiteOptionsService(db)
    await service.save({"twitter_link": "t", "evil": "x"})

    row = await db.get(SiteOption, "site_essentials")
    assert "evil" not in row.value
    assert set(row.value) == set(ALL_KEYS)


async def test_reset(db):
    service = SiteOptionsService(db)
    await service.save({"twitter_link": "t"})
    options = await service.reset()
    assert options.get("twitter_link") == ""
    assert await service.get("twitter_link") == ""


async def test_corrupt_record_reads_as_empty(db):
    db.add(SiteOption(name="site_essentials", value=["not", "a", "mapping"]))
    await db.commit()

    options = await SiteOptionsService(db).load()
    assert options.get("twitter_link") == ""


class MemoryCache:
    """Stand-in for the Redis client: string values in a dict."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value


class BrokenCache:
    async def get(self, key):
        raise RedisError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisError("connection refused")


async def test_save_writes_record_through_to_cache(db):
    cache = MemoryCache()
    service = SiteOptionsService(db, cache=cache)
    await service.save({"twitter_link": "http://twitter.com/example"})

    cached = json.loads(cache.data[service.cache_key])
    assert cached["twitter_link"] == "http://twitter.com/example"
    assert set(cached) == set(ALL_KEYS)


async def test_cached_record_is_replaced_on_each_save(db):
    cache = MemoryCache()
    service = SiteOptionsService(db, cache=cache)
    await service.save({"twitter_link": "t", "ga_code": "<script>ga()</script>"})
    await service.save({"facebook_link": "f"})

    cached = json.loads(cache.data[service.cache_key])
    assert cached["twitter_link"] == ""
    assert cached["ga_code"] == ""
    assert cached["facebook_link"] == "f"

    options = await service.load()
    assert options.get("twitter_link") == ""


async def test_load_prefers_cache_and_fills_it_on_miss(db):
    cache = MemoryCache()
    await SiteOptionsService(db).save({"twitter_link": "from-db"})

    service = SiteOptionsService(db, cache=cache)
    assert (await service.load()).get("twitter_link") == "from-db"
    assert service.cache_key in cache.data

    cache.data[service.cache_key] = json.dumps({"twitter_link": "from-cache"})
    assert (await service.load()).get("twitter_link") == "from-cache"


async def test_unreadable_cache_entry_falls_back_to_database(db):
    cache = MemoryCache()
    service = SiteOptionsService(db, cache=cache)
    await service.save({"twitter_link": "t"})

    cache.data[service.cache_key] = "not json"
    assert (await service.load()).get("twitter_link") == "t"


async def test_cache_errors_fall_back_to_database(db):
    service = SiteOptionsService(db, cache=BrokenCache())
    saved = await service.save({"twitter_link": "http://twitter.com/example"})
    assert saved.get("twitter_link") == "http://twitter.com/example"

    options = await service.load()
    assert options.get("twitter_link") == "http://twitter.com/example"
