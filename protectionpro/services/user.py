from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from protectionpro.db.models.user import User
from protectionpro.services.auth import hash_password


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        username: str,
        password: str,
        display_name: Optional[str] = None,
        is_admin: bool = False,
    ) -> User:
        """Create a new user."""
        username = username.strip()
        if not username:
            raise ValueError("Username cannot be empty")
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters")
        if await self.get_by_username(username):
            raise ValueError(f"User {username} already exists")

        user = User(
            username=username,
            display_name=display_name or username,
            password_hash=hash_password(password),
            is_admin=is_admin,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def set_password(self, user: User, password: str) -> User:
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters")
        user.password_hash = hash_password(password)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def set_admin(self, user: User, is_admin: bool = True) -> User:
        user.is_admin = is_admin
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def count_admins(self) -> int:
        """Count active admin users."""
        result = await self.db.execute(
            select(func.count())
            .select_from(User)
            .where(User.is_admin == True, User.is_active == True)
        )
        return result.scalar() or 0
