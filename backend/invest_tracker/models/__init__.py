"""SQLAlchemy models package."""

from invest_tracker.models.user import User
from invest_tracker.models.category import Category
from invest_tracker.models.transaction import Transaction, TransactionType
from invest_tracker.models.holding import Holding
from invest_tracker.models.portfolio_snapshot import PortfolioSnapshot
from invest_tracker.models.expense import MonthlyExpense, ExpenseItem
from invest_tracker.models.user_setting import UserSetting

__all__ = [
    "User",
    "Category",
    "Transaction",
    "TransactionType",
    "Holding",
    "PortfolioSnapshot",
    "MonthlyExpense",
    "ExpenseItem",
    "UserSetting",
]
