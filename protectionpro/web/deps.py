from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.config import settings
from protectionpro.core.locale import get_locale
from protectionpro.core.redis import get_redis
from protectionpro.db.session import get_db
from protectionpro.schemas.site_options import SiteOptions
from protectionpro.services.auth import AuthService
from protectionpro.services.site_options import SiteOptionsService


async def get_options_service(
    db: AsyncSession = Depends(get_db),
) -> SiteOptionsService:
    return SiteOptionsService(db, cache=await get_redis())


async def get_site_options(
    service: SiteOptionsService = Depends(get_options_service),
) -> SiteOptions:
    """The options record, read once per request."""
    return await service.load()


def current_locale(request: Request) -> str:
    return get_locale(request)


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Get current user if logged in, None otherwise."""
    token: Optional[str] = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    auth_service = AuthService(db)
    return await auth_service.get_user_by_session_token(token)


async def require_admin(user=Depends(get_current_user_optional)):
    """Require admin user, redirect to login if not logged in."""
    if not user:
        raise HTTPException(status_code=302, headers={"Location": "/admin/login"})
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
