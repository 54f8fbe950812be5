"""Investment category management."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.exceptions import ConflictError
from invest_tracker.crud.repositories import category_crud
from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.models.portfolio_snapshot import PortfolioSnapshot
from invest_tracker.models.transaction import Transaction
from invest_tracker.schemas.category import CategoryCreate, CategoryUpdate
from invest_tracker.services.holding_service import ZERO, HoldingService

logger = logging.getLogger(__name__)


def _to_response(category: Category, holding: Optional[Holding]) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "color": category.color,
        "description": category.description,
        "quantity": Decimal(holding.quantity) if holding else ZERO,
        "average_price": Decimal(holding.average_price) if holding else ZERO,
        "total_invested": Decimal(holding.total_invested) if holding else ZERO,
        "current_value": Decimal(holding.current_value) if holding else ZERO,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


class CategoryService:
    """CRUD for a user's investment categories."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.holdings = HoldingService(db)

    async def get_owned(self, user_id: UUID, category_id: UUID) -> Optional[Category]:
        """The category if it exists and belongs to the user, else None."""
        return await category_crud.get_where(
            self.db, Category.id == category_id, Category.user_id == user_id
        )

    async def _name_taken(
        self, user_id: UUID, name: str, exclude_id: Optional[UUID] = None
    ) -> bool:
        criteria = [Category.user_id == user_id, Category.name == name]
        if exclude_id is not None:
            criteria.append(Category.id != exclude_id)
        return await category_crud.get_where(self.db, *criteria) is not None

    async def list_categories(self, user_id: UUID) -> List[dict]:
        """All categories of a user with their holding columns, newest first."""
        result = await self.db.execute(
            select(Category, Holding)
            .outerjoin(Holding, Holding.category_id == Category.id)
            .where(Category.user_id == user_id)
            .order_by(Category.created_at.desc(), Category.name)
        )
        return [_to_response(category, holding) for category, holding in result.all()]

    async def get_category_detail(self, category: Category) -> dict:
        holding = await self.holdings.get_for_category(category.id)
        count = await self.db.scalar(
            select(func.count(Transaction.id)).where(Transaction.category_id == category.id)
        )
        return {**_to_response(category, holding), "transaction_count": count or 0}

    async def create_category(self, user_id: UUID, data: CategoryCreate) -> dict:
        """
        Create a category and its zeroed holding.

        Raises:
            ConflictError: The user already has a category with this name
        """
        if await self._name_taken(user_id, data.name):
            raise ConflictError(f"Category '{data.name}' already exists")

        category = await category_crud.create(
            self.db,
            user_id=user_id,
            name=data.name,
            color=data.color,
            description=data.description,
        )
        holding = await self.holdings.create_empty(category.id)
        await self._commit_unique(data.name)

        logger.info("Category created | id=%s | user=%s", category.id, user_id)
        return _to_response(category, holding)

    async def update_category(self, category: Category, data: CategoryUpdate) -> dict:
        """Update supplied fields only."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "description" in data.model_fields_set:
            changes["description"] = data.description

        new_name = changes.get("name")
        if new_name and new_name != category.name:
            if await self._name_taken(category.user_id, new_name, exclude_id=category.id):
                raise ConflictError(f"Category '{new_name}' already exists")

        await category_crud.update(self.db, category, **changes)
        await self._commit_unique(new_name or category.name)

        return await self.get_category_detail(category)

    async def delete_category(self, category: Category) -> None:
        """Delete a category with its transactions, holding and snapshots."""
        category_id = category.id
        await self.db.execute(delete(PortfolioSnapshot).where(PortfolioSnapshot.category_id == category_id))
        await self.db.execute(delete(Transaction).where(Transaction.category_id == category_id))
        await self.db.execute(delete(Holding).where(Holding.category_id == category_id))
        await category_crud.delete(self.db, category)
        await self.db.commit()
        logger.info("Category deleted | id=%s", category_id)

    async def _commit_unique(self, name: str) -> None:
        # A concurrent request may have taken the name since the check
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(f"Category '{name}' already exists") from e
