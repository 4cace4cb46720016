"""
User service for user-related database operations.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from appserver.core.exceptions import UserAlreadyExistsException
from appserver.core.security import hash_password
from appserver.models.user import User


class UserService:
    """Service for user database operations."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize with database session."""
        self.db = db

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        """
        Get a user by ID.

        Args:
            user_id: User UUID

        Returns:
            User if found, None otherwise
        """
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        """
        Get a user by username.

        Args:
            username: Username, matched case-insensitively

        Returns:
            User if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.username == username.lower())
        )
        return result.scalar_one_or_none()

    async def create(self, username: str, password: str) -> User:
        """
        Create a new user.

        Args:
            username: Requested username
            password: Plain text password, stored as an Argon2 hash

        Returns:
            Created user

        Raises:
            UserAlreadyExistsException: If the username is taken
        """
        existing = await self.get_by_username(username)
        if existing:
            raise UserAlreadyExistsException()

        user = User(
            username=username.lower(),
            hashed_password=hash_password(password),
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        return user

    async def record_login(self, user: User) -> User:
        """Stamp a successful login and clear the failure counter."""
        user.record_login()
        await self.db.flush()
        return user

    async def record_failed_login(
        self,
        user: User,
        max_attempts: int,
        lockout_minutes: int,
    ) -> User:
        """Count a failed login, locking the account at the threshold."""
        user.record_failed_login(max_attempts, lockout_minutes)
        await self.db.flush()
        return user
