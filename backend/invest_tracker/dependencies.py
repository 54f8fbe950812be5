"""FastAPI dependencies for authentication and ownership checks."""

from uuid import UUID

from fastapi import Depends, HTTPException, Path, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.core.exceptions import NotFoundError
from invest_tracker.core.security import decode_token
from invest_tracker.crud.user import user_crud
from invest_tracker.models.category import Category
from invest_tracker.models.transaction import Transaction
from invest_tracker.models.user import User
from invest_tracker.services.category_service import CategoryService
from invest_tracker.services.market_data import PriceSourceRegistry, get_price_source_registry

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired, or its
            user no longer exists
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise _unauthorized("Invalid or expired token")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    user = await user_crud.get(db, user_id)
    if user is None:
        raise _unauthorized("Could not validate credentials")

    request.state.username = user.username
    return user


async def get_owned_category(db: AsyncSession, user: User, category_id: UUID) -> Category:
    """
    Resolve a category that belongs to the user.

    Absent and not-owned are reported identically so existence never leaks.
    """
    category = await CategoryService(db).get_owned(user.id, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def get_verified_category(
    category_id: UUID = Path(..., description="Category ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Category:
    """Path-parameter category, verified to belong to the current user."""
    return await get_owned_category(db, current_user, category_id)


async def get_verified_transaction(
    transaction_id: UUID = Path(..., description="Transaction ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Transaction:
    """Path-parameter transaction whose category belongs to the current user."""
    result = await db.execute(
        select(Transaction)
        .join(Category, Category.id == Transaction.category_id)
        .where(Transaction.id == transaction_id, Category.user_id == current_user.id)
    )
    transaction = result.scalar_one_or_none()
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return transaction


def get_price_sources() -> PriceSourceRegistry:
    """Price source registry; overridden in tests."""
    return get_price_source_registry()
