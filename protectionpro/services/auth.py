import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.config import settings
from protectionpro.db.models.user import Session, User

logger = logging.getLogger(__name__)


def _prepare_password(password: str) -> bytes:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest().encode("ascii")
    return encoded


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt()).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prepare_password(plain), hashed.encode("ascii"))
    except ValueError:
        return False


def generate_session_token() -> str:
    """Generate a secure session token."""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Hash a token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def form_token(session_token: str) -> str:
    """Form token bound to a login session, checked on admin posts."""
    return hmac.new(
        settings.secret_key.encode(), session_token.encode(), hashlib.sha256
    ).hexdigest()


def verify_form_token(session_token: str, token: str) -> bool:
    return hmac.compare_digest(form_token(session_token), token)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, username: str, password: str) -> User:
        """Check credentials and return the active user."""
        result = await self.db.execute(
            select(User).where(User.username == username.strip())
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login for %r", username)
            raise ValueError("Invalid username or password")
        if not user.is_active:
            raise ValueError("Account is disabled")

        user.last_login = datetime.now(timezone.utc)
        await self.db.commit()
        return user

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_session(self, user_id: UUID) -> str:
        """Create a new session and return the token."""
        token = generate_session_token()

        session = Session(
            user_id=user_id,
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc)
            + timedelta(days=settings.session_expire_days),
        )
        self.db.add(session)
        await self.db.commit()

        return token

    async def get_user_by_session_token(self, token: str) -> Optional[User]:
        """Get user by session token."""
        result = await self.db.execute(
            select(Session).where(
                Session.token_hash == hash_token(token),
                Session.expires_at > datetime.now(timezone.utc),
            )
        )
        session = result.scalar_one_or_none()

        if not session:
            return None

        user = await self.get_user_by_id(session.user_id)
        if not user or not user.is_active:
            return None
        return user

    async def invalidate_session(self, token: str) -> bool:
        """Invalidate a session token."""
        result = await self.db.execute(
            select(Session).where(Session.token_hash == hash_token(token))
        )
        session = result.scalar_one_or_none()

        if session:
            await self.db.delete(session)
            await self.db.commit()
            return True
        return False
