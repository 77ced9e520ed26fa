import logging
from collections import OrderedDict
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.config import settings
from protectionpro.core.locale import (
    CONTACT_FORM_ID,
    DISTRIBUTOR_FORM_IDS,
    NOT_FOUND_COPY,
    NOT_FOUND_PATHS,
    SUCCESS_PAGES,
    TRANSLATION_CONTACT_FORM_IDS,
    get_locale,
    site_url,
)
from protectionpro.core.redis import get_redis
from protectionpro.db.models.content import ContentItem, PostType
from protectionpro.db.session import get_db, get_db_context
from protectionpro.schemas.site_options import SiteOptions
from protectionpro.services.content import ContentService
from protectionpro.services.site_options import SiteOptionsService
from protectionpro.web.deps import current_locale, get_site_options
from protectionpro.web.templating import templates

logger = logging.getLogger(__name__)

web_router = APIRouter()

HOME_SLUG = "home"
FOOTER_SLUG = "footer"
POSTS_PER_PAGE = 10

PAGE_TEMPLATES = {
    "home": "pages/home.html",
    "about": "pages/about.html",
    "contact": "pages/contact.html",
    "distributor": "pages/distributor.html",
    "faq": "pages/faq.html",
    "case_studies": "pages/case_studies.html",
    "products": "pages/products.html",
    "resources": "pages/resources.html",
    "training": "pages/training.html",
    "form_confirmation": "pages/form_confirmation.html",
    "infinity": "pages/infinity.html",
    "translation": "pages/translation.html",
    "landing": "pages/landing.html",
}
DEFAULT_PAGE_TEMPLATE = "pages/page.html"

# Footer variant used by each page template
FOOTER_VARIANTS = {
    "form_confirmation": "success",
    "translation": "translations",
}


def item_url(item: ContentItem) -> Optional[str]:
    """Public URL of a content item, None for types without their own page."""
    if item.post_type == PostType.PAGE:
        if item.slug == HOME_SLUG:
            return site_url("", item.locale)
        return site_url(f"/{item.slug}", item.locale)
    if item.post_type == PostType.POST:
        return site_url(f"/news/{item.slug}", item.locale)
    if item.post_type == PostType.CASE_STUDY:
        return site_url(f"/case-studies/{item.slug}", item.locale)
    return None


def language_links(
    locale: str, translations: Optional[list[ContentItem]] = None
) -> list[dict[str, Any]]:
    """Switcher entries: translations of the item, or each language's home."""
    if translations is not None:
        urls = {t.locale: item_url(t) for t in translations if item_url(t)}
    else:
        urls = {code: site_url("", code) for code in settings.languages}

    return [
        {
            "code": code,
            "url": urls[code],
            "active": code == locale,
            "hidden_on_desktop": code in settings.switcher_hidden_languages,
        }
        for code in settings.languages
        if code in urls
    ]


async def base_context(
    request: Request,
    db: AsyncSession,
    options: SiteOptions,
    item: Optional[ContentItem] = None,
    **extra: Any,
) -> dict[str, Any]:
    """Context shared by every themed page: options, locale, footer, switcher."""
    locale = get_locale(request)
    content = ContentService(db)

    footer = await content.get_page(FOOTER_SLUG, locale)
    if footer is None and locale != settings.default_language:
        footer = await content.get_page(FOOTER_SLUG, settings.default_language)

    translations = await content.get_translations(item) if item is not None else None

    context = {
        "options": options,
        "locale": locale,
        "item": item,
        "footer": footer,
        "footer_variant": "default",
        "languages": language_links(locale, translations),
        "noindex": item is not None and item.slug in SUCCESS_PAGES,
        "item_url": item_url,
        "translation_form_id": TRANSLATION_CONTACT_FORM_IDS.get(locale),
    }
    context.update(extra)
    return context


# ============= PAGE DATA =============

async def faq_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    faqs = await content.list_items(PostType.FAQ, locale, newest_first=False)
    return {"faqs": faqs}


async def case_studies_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    featured = await content.list_items(PostType.CASE_STUDY, locale, terms=["featured"])
    studies = await content.list_items(
        PostType.CASE_STUDY,
        locale,
        terms=["home_page", "product_page", "standard"],
        limit=4,
    )
    return {"featured": featured, "studies": studies}


async def products_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    advantages = await content.list_items(PostType.ADVANTAGE, locale, newest_first=False)
    studies = await content.list_items(PostType.CASE_STUDY, locale, terms=["product_page"])
    faqs = await content.list_items(
        PostType.FAQ, locale, terms=settings.product_faq_terms, limit=6
    )
    return {"advantages": advantages, "studies": studies, "faqs": faqs}


async def training_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    videos = await content.list_items(PostType.VIDEO, locale)
    categories: "OrderedDict[str, list[ContentItem]]" = OrderedDict()
    for video in videos:
        for term in video.terms or ["other"]:
            categories.setdefault(term, []).append(video)
    return {"videos": videos, "categories": categories}


async def distributor_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    return {"form_id": DISTRIBUTOR_FORM_IDS.get(locale)}


async def contact_page_data(content: ContentService, locale: str) -> dict[str, Any]:
    return {"form_id": CONTACT_FORM_ID}


PAGE_DATA = {
    "faq": faq_page_data,
    "case_studies": case_studies_page_data,
    "products": products_page_data,
    "training": training_page_data,
    "distributor": distributor_page_data,
    "contact": contact_page_data,
}


async def render_page(
    request: Request,
    page: ContentItem,
    db: AsyncSession,
    options: SiteOptions,
) -> HTMLResponse:
    template_name = PAGE_TEMPLATES.get(page.template or "", DEFAULT_PAGE_TEMPLATE)
    content = ContentService(db)
    extra: dict[str, Any] = {}

    loader = PAGE_DATA.get(page.template or "")
    if loader is not None:
        extra = await loader(content, page.locale)

    context = await base_context(request, db, options, item=page, page=page, **extra)
    context["footer_variant"] = FOOTER_VARIANTS.get(page.template or "", "default")
    return templates.TemplateResponse(request, template_name, context)


# ============= ROUTES =============

@web_router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    locale: str = Depends(current_locale),
    options: SiteOptions = Depends(get_site_options),
    db: AsyncSession = Depends(get_db),
):
    page = await ContentService(db).get_page(HOME_SLUG, locale)
    if not page:
        raise HTTPException(status_code=404, detail="Home page not found")
    return await render_page(request, page, db, options)


@web_router.get("/news", response_class=HTMLResponse)
async def news_archive(
    request: Request,
    page: int = 1,
    locale: str = Depends(current_locale),
    options: SiteOptions = Depends(get_site_options),
    db: AsyncSession = Depends(get_db),
):
    """Latest news and announcements."""
    page = max(page, 1)
    posts, total = await ContentService(db).list_posts(
        locale, page=page, per_page=POSTS_PER_PAGE
    )
    has_more = (page * POSTS_PER_PAGE) < total

    context = await base_context(
        request,
        db,
        options,
        posts=posts,
        total=total,
        page_number=page,
        has_more=has_more,
    )
    return templates.TemplateResponse(request, "pages/archive.html", context)


@web_router.get("/news/{slug}", response_class=HTMLResponse)
async def news_detail(
    request: Request,
    slug: str,
    locale: str = Depends(current_locale),
    options: SiteOptions = Depends(get_site_options),
    db: AsyncSession = Depends(get_db),
):
    post = await ContentService(db).get_item(PostType.POST, slug, locale)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    context = await base_context(request, db, options, item=post, post=post)
    return templates.TemplateResponse(request, "pages/post_detail.html", context)


@web_router.get("/case-studies/{slug}", response_class=HTMLResponse)
async def case_study_detail(
    request: Request,
    slug: str,
    locale: str = Depends(current_locale),
    options: SiteOptions = Depends(get_site_options),
    db: AsyncSession = Depends(get_db),
):
    study = await ContentService(db).get_item(PostType.CASE_STUDY, slug, locale)
    if not study:
        raise HTTPException(status_code=404, detail="Case study not found")

    context = await base_context(request, db, options, item=study, study=study)
    return templates.TemplateResponse(request, "pages/case_study_detail.html", context)


@web_router.get("/partials/faq-search", response_class=HTMLResponse)
async def faq_search_partial(
    request: Request,
    q: str = "",
    locale: str = Depends(current_locale),
    db: AsyncSession = Depends(get_db),
):
    """FAQ accordion matching a search query."""
    faqs = []
    if q.strip():
        faqs = await ContentService(db).search(PostType.FAQ, q, locale)

    return templates.TemplateResponse(
        request,
        "partials/faq_search_results.html",
        {"query": q, "faqs": faqs, "locale": locale},
    )


@web_router.get("/{slug}", response_class=HTMLResponse)
async def page_detail(
    request: Request,
    slug: str,
    locale: str = Depends(current_locale),
    options: SiteOptions = Depends(get_site_options),
    db: AsyncSession = Depends(get_db),
):
    if slug == FOOTER_SLUG:
        raise HTTPException(status_code=404, detail="Page not found")
    page = await ContentService(db).get_page(slug, locale)
    if not page:
        raise HTTPException(status_code=404, detail="Page not found")
    return await render_page(request, page, db, options)


# ============= 404 =============

def not_found_buttons(options: SiteOptions, locale: str) -> list[dict[str, Any]]:
    """Home, distributor and FAQ buttons with their icons from the options."""
    copy = NOT_FOUND_COPY.get(locale)
    buttons = []
    positions = zip(("left", "middle", "right"), NOT_FOUND_PATHS)
    for index, (position, default_path) in enumerate(positions):
        icon = options.render(f"404_{position}_button_icon")
        if copy:
            path, label = copy["buttons"][index]
            url = site_url(path, locale)
        else:
            url = site_url(default_path, locale)
            label = options.render(f"404_{position}_button_text")
        buttons.append({"url": url, "icon": icon, "label": label})
    return buttons


async def not_found_response(request: Request) -> HTMLResponse:
    """Themed 404 page, built outside the normal dependency chain."""
    locale = get_locale(request)
    logger.info("404 %s (locale=%s)", request.url.path, locale)

    async with get_db_context() as db:
        options = await SiteOptionsService(db, cache=await get_redis()).load()
        context = await base_context(
            request,
            db,
            options,
            not_found=NOT_FOUND_COPY.get(locale),
            buttons=not_found_buttons(options, locale),
        )

    return templates.TemplateResponse(
        request, "pages/404.html", context, status_code=404
    )
