"""CRUD operations for users."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.security import hash_password
from invest_tracker.crud.base import CRUDBase
from invest_tracker.models.user import User


class UserCRUD(CRUDBase[User]):
    """CRUD operations for User model."""

    async def get_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """Get user by username."""
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """Create a new user with a hashed password."""
        return await self.create(
            db,
            username=username,
            password_hash=hash_password(password),
            display_name=display_name or username,
            email=email,
        )


# Create singleton instance
user_crud = UserCRUD(User)
