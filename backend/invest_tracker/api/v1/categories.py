"""Category API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import get_current_user, get_verified_category
from invest_tracker.models.category import Category
from invest_tracker.models.user import User
from invest_tracker.schemas.category import (
    CategoryCreate,
    CategoryDetail,
    CategoryResponse,
    CategoryUpdate,
)
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.services.category_service import CategoryService

router = APIRouter()


@router.get("/", response_model=ApiResponse[List[CategoryResponse]])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's categories with their holdings, newest first."""
    return ok(await CategoryService(db).list_categories(current_user.id))


@router.get("/{category_id}", response_model=ApiResponse[CategoryDetail])
async def get_category(
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    return ok(await CategoryService(db).get_category_detail(category))


@router.post(
    "/",
    response_model=ApiResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a category; its holding starts at zero."""
    category = await CategoryService(db).create_category(current_user.id, data)
    return ok(category, "Category created successfully")


@router.put("/{category_id}", response_model=ApiResponse[CategoryDetail])
async def update_category(
    data: CategoryUpdate,
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    updated = await CategoryService(db).update_category(category, data)
    return ok(updated, "Category updated successfully")


@router.delete("/{category_id}", response_model=ApiResponse[None])
async def delete_category(
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category together with its transactions, holding and snapshots."""
    await CategoryService(db).delete_category(category)
    return ok(message="Category deleted successfully")
