"""User registration, login and password management."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainValidationError,
)
from invest_tracker.core.security import create_access_token, hash_password, verify_password
from invest_tracker.crud.user import user_crud
from invest_tracker.models.user import User
from invest_tracker.utils.logging_utils import redact_email, redact_username

logger = logging.getLogger(__name__)

# Verified against on unknown usernames so login timing does not reveal them
_DUMMY_PASSWORD_HASH = hash_password("dummy-password-for-timing")


def issue_token(user: User) -> str:
    return create_access_token(
        {"sub": str(user.id), "username": user.username, "display_name": user.display_name}
    )


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        username: str,
        password: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """
        Create a user account.

        Raises:
            ConflictError: The username is taken
        """
        if await user_crud.get_by_username(self.db, username):
            raise ConflictError("Username already exists")

        user = await user_crud.create_user(
            self.db, username=username, password=password, display_name=display_name, email=email
        )
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Username already exists") from e

        logger.info(
            "User registered | user=%s | email=%s", redact_username(username), redact_email(email)
        )
        return user

    async def login(self, username: str, password: str) -> tuple[str, User]:
        """
        Check credentials and issue an access token.

        Raises:
            AuthenticationError: Unknown username or wrong password (same message)
        """
        user = await user_crud.get_by_username(self.db, username)
        if user is None:
            verify_password(password, _DUMMY_PASSWORD_HASH)
            logger.info("Login failed | user=%s", redact_username(username))
            raise AuthenticationError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            logger.info("Login failed | user=%s", redact_username(username))
            raise AuthenticationError("Invalid username or password")

        return issue_token(user), user

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await user_crud.get(self.db, user_id)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """
        Raises:
            DomainValidationError: current_password is wrong
        """
        if not verify_password(current_password, user.password_hash):
            raise DomainValidationError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("Password changed | user=%s", redact_username(user.username))
