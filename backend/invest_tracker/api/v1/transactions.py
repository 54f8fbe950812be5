"""Transaction API endpoints."""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import (
    get_current_user,
    get_owned_category,
    get_verified_category,
    get_verified_transaction,
)
from invest_tracker.models.category import Category
from invest_tracker.models.transaction import Transaction
from invest_tracker.models.user import User
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from invest_tracker.services.transaction_service import TransactionService, to_response

router = APIRouter()


@router.get("/", response_model=ApiResponse[List[TransactionResponse]])
async def list_transactions(
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's transactions, newest first."""
    return ok(await TransactionService(db).list_transactions(current_user.id, limit))


@router.get("/recent", response_model=ApiResponse[List[TransactionResponse]])
async def list_recent_transactions(
    days: int = Query(7, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await TransactionService(db).list_recent(current_user.id, days))


@router.get("/date-range", response_model=ApiResponse[List[TransactionResponse]])
async def list_transactions_by_date_range(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Transactions dated within [start_date, end_date], both inclusive."""
    return ok(
        await TransactionService(db).list_by_date_range(current_user.id, start_date, end_date)
    )


@router.get("/category/{category_id}", response_model=ApiResponse[List[TransactionResponse]])
async def list_category_transactions(
    limit: int = Query(50, ge=1, le=1000),
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    return ok(await TransactionService(db).list_by_category(category, limit))


@router.post(
    "/",
    response_model=ApiResponse[TransactionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a buy or sell.

    A sell larger than the held quantity is rejected with 400.
    """
    category = await get_owned_category(db, current_user, data.category_id)
    transaction = await TransactionService(db).create_transaction(category, data)
    return ok(
        to_response(transaction, category.name, category.color),
        "Transaction created successfully",
    )


@router.put("/{transaction_id}", response_model=ApiResponse[TransactionResponse])
async def update_transaction(
    data: TransactionUpdate,
    transaction: Transaction = Depends(get_verified_transaction),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a transaction, optionally moving it to another category."""
    target_id = data.category_id or transaction.category_id
    target = await get_owned_category(db, current_user, target_id)
    updated = await TransactionService(db).update_transaction(transaction, data, target)
    return ok(to_response(updated, target.name, target.color), "Transaction updated successfully")


@router.delete("/{transaction_id}", response_model=ApiResponse[None])
async def delete_transaction(
    transaction: Transaction = Depends(get_verified_transaction),
    db: AsyncSession = Depends(get_db),
):
    await TransactionService(db).delete_transaction(transaction)
    return ok(message="Transaction deleted successfully")
