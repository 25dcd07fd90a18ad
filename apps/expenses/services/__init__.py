"""
Expenses services - Business logic layer.

Expense and expense-category management. Expenses feed reports only;
they never change partner balances.
"""

from .expense_management import (
    create_expense,
    update_expense,
    delete_expense,
    create_category,
    delete_category,
)

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    CategoryInUseError,
    InvalidExpenseAmountError,
    NotExpenseOwnerError,
)

__all__ = [
    'create_expense',
    'update_expense',
    'delete_expense',
    'create_category',
    'delete_category',
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'CategoryNotFoundError',
    'DuplicateCategoryError',
    'CategoryInUseError',
    'InvalidExpenseAmountError',
    'NotExpenseOwnerError',
]
