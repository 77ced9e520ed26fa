import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.config import settings
from protectionpro.db.session import get_db
from protectionpro.services.auth import AuthService, form_token, verify_form_token
from protectionpro.services.site_options import SiteOptionsService
from protectionpro.web.deps import get_options_service, require_admin
from protectionpro.web.templating import templates

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin")
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

SETTINGS_PATH = "/admin/site-essentials"
FORM_TOKEN_FIELD = "_token"


# ============= LOGIN =============

@admin_router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    return templates.TemplateResponse(
        request,
        "admin/login.html",
        {"title": "Log In", "error": None},
    )


@admin_router.post("/login", response_class=HTMLResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    db: AsyncSession = Depends(get_db),
):
    auth_service = AuthService(db)
    try:
        user = await auth_service.authenticate(username, password)
    except ValueError as e:
        return templates.TemplateResponse(
            request,
            "admin/login.html",
            {"title": "Log In", "error": str(e)},
            status_code=400,
        )

    token = await auth_service.create_session(user.id)
    logger.info("User %s logged in", user.username)

    response = RedirectResponse(url=SETTINGS_PATH, status_code=302)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=not settings.debug and settings.base_url.startswith("https"),
        samesite="lax",
        max_age=settings.session_expire_days * 24 * 3600,
    )
    return response


@admin_router.post("/logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await AuthService(db).invalidate_session(token)

    response = RedirectResponse(url="/admin/login", status_code=302)
    response.delete_cookie(settings.session_cookie_name)
    return response


# ============= SITE ESSENTIALS =============

@admin_router.get("/site-essentials", response_class=HTMLResponse)
async def site_essentials_page(
    request: Request,
    updated: bool = False,
    user=Depends(require_admin),
    service: SiteOptionsService = Depends(get_options_service),
):
    """Settings form for social links, Google scripts and 404 copy."""
    options = await service.load()
    return templates.TemplateResponse(
        request,
        "admin/site_essentials.html",
        {
            "user": user,
            "title": "Site Essentials",
            "registry": service.registry,
            "options": options,
            "updated": updated,
            "form_token": form_token(request.cookies.get(settings.session_cookie_name, "")),
            "form_token_field": FORM_TOKEN_FIELD,
        },
    )


@admin_router.post("/site-essentials")
async def save_site_essentials(
    request: Request,
    user=Depends(require_admin),
    service: SiteOptionsService = Depends(get_options_service),
):
    """Overwrite the whole options record with the submitted form."""
    form = await request.form()
    session_token = request.cookies.get(settings.session_cookie_name, "")
    submitted_token = form.get(FORM_TOKEN_FIELD)
    if not isinstance(submitted_token, str) or not verify_form_token(session_token, submitted_token):
        logger.warning("Rejected Site Essentials post from %s: bad form token", user.username)
        raise HTTPException(status_code=403, detail="The link you followed has expired.")

    submission = {key: value for key, value in form.items() if isinstance(value, str)}
    await service.save(submission)
    logger.info("Site Essentials updated by %s", user.username)
    return RedirectResponse(url=f"{SETTINGS_PATH}?updated=1", status_code=302)


@admin_router.get("", include_in_schema=False)
async def admin_index(user=Depends(require_admin)):
    return RedirectResponse(url=SETTINGS_PATH, status_code=302)
