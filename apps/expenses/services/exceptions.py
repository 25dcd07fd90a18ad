"""Domain exceptions for expenses app."""


class ExpensesServiceError(Exception):
    """Base exception for all expenses service errors."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Expense does not exist."""
    pass


class CategoryNotFoundError(ExpensesServiceError):
    """Expense category does not exist."""
    pass


class DuplicateCategoryError(ExpensesServiceError):
    """A category with this name already exists."""
    pass


class CategoryInUseError(ExpensesServiceError):
    """Category still has expenses and cannot be deleted."""
    pass


class InvalidExpenseAmountError(ExpensesServiceError):
    """Expense amount must be greater than zero."""
    pass


class NotExpenseOwnerError(ExpensesServiceError):
    """Only the partner who recorded an expense may change it."""
    pass
