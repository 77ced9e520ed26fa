#!/usr/bin/env python3
"""Create an admin account, or promote an existing user to admin."""
import asyncio
import getpass
import logging
import sys
from typing import Optional

from protectionpro.db.session import async_session_maker
from protectionpro.services.user import UserService


async def make_admin(username: str, password: Optional[str]):
    async with async_session_maker() as db:
        service = UserService(db)
        user = await service.get_by_username(username)

        if user:
            await service.set_admin(user)
            if password:
                await service.set_password(user, password)
            print(f"User {user.display_name} ({username}) is now an admin!")
            return

        if not password:
            password = getpass.getpass(f"Password for new admin {username}: ")
        try:
            user = await service.create_user(username, password, is_admin=True)
        except ValueError as e:
            print(f"Could not create {username}: {e}")
            sys.exit(1)

        print(f"Admin {user.username} created.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) < 2:
        print("Usage: python make_admin.py <username> [password]")
        sys.exit(1)

    username = sys.argv[1]
    password = sys.argv[2] if len(sys.argv) > 2 else None
    asyncio.run(make_admin(username, password))
