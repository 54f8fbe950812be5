"""Repository instances for the models that use the generic CRUD helpers."""

from invest_tracker.crud.base import CRUDBase
from invest_tracker.models.category import Category
from invest_tracker.models.expense import ExpenseItem, MonthlyExpense
from invest_tracker.models.holding import Holding
from invest_tracker.models.user_setting import UserSetting

category_crud = CRUDBase(Category)
holding_crud = CRUDBase(Holding)
monthly_expense_crud = CRUDBase(MonthlyExpense)
expense_item_crud = CRUDBase(ExpenseItem)
user_setting_crud = CRUDBase(UserSetting)
