from datetime import date
from decimal import Decimal
import logging
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from apps.expenses.models import Expense, ExpenseCategory
from .exceptions import (
    CategoryInUseError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    ExpenseNotFoundError,
    InvalidExpenseAmountError,
    NotExpenseOwnerError,
)

logger = logging.getLogger(__name__)


def _get_category(category_id: UUID) -> ExpenseCategory:
    try:
        return ExpenseCategory.objects.get(pk=category_id)
    except ExpenseCategory.DoesNotExist:
        raise CategoryNotFoundError(f"Expense category {category_id} not found")


def _validate_amount(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise InvalidExpenseAmountError("Expense amount must be greater than zero")


def _lock_expense(expense_id: UUID, actor_id) -> Expense:
    try:
        expense = Expense.objects.select_for_update().get(pk=expense_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")

    if actor_id is not None and str(expense.created_by_id) != str(actor_id):
        raise NotExpenseOwnerError("Only the partner who recorded this expense can change it")
    return expense


@transaction.atomic
def create_expense(
    *,
    category_id: UUID,
    amount: Decimal,
    description: str,
    created_by=None,
    expense_date: Optional[date] = None,
    receipt_url: str = '',
) -> Expense:
    """
    Record a business expense.

    Raises:
        InvalidExpenseAmountError: If amount is not positive
        CategoryNotFoundError: If category doesn't exist
    """
    _validate_amount(amount)
    category = _get_category(category_id)

    fields = {
        'category': category,
        'amount': amount,
        'description': description,
        'receipt_url': receipt_url,
        'created_by': created_by,
    }
    if expense_date is not None:
        fields['expense_date'] = expense_date

    expense = Expense.objects.create(**fields)
    logger.info("Expense %s recorded: %s in %s", expense.id, amount, category.name)
    return expense


@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    actor_id: Optional[UUID] = None,
    category_id: Optional[UUID] = None,
    amount: Optional[Decimal] = None,
    description: Optional[str] = None,
    expense_date: Optional[date] = None,
    receipt_url: Optional[str] = None,
) -> Expense:
    """
    Edit an expense.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotExpenseOwnerError: If actor_id is given and did not record it
    """
    expense = _lock_expense(expense_id, actor_id)

    if amount is not None:
        _validate_amount(amount)
        expense.amount = amount
    if category_id is not None:
        expense.category = _get_category(category_id)
    if description is not None:
        expense.description = description
    if expense_date is not None:
        expense.expense_date = expense_date
    if receipt_url is not None:
        expense.receipt_url = receipt_url

    expense.save()
    return expense


@transaction.atomic
def delete_expense(*, expense_id: UUID, actor_id: Optional[UUID] = None) -> None:
    expense = _lock_expense(expense_id, actor_id)
    expense.delete()
    logger.info("Expense %s deleted", expense_id)


def create_category(*, name: str, description: str = '') -> ExpenseCategory:
    """
    Raises:
        DuplicateCategoryError: If a category with the same name exists (case-insensitive)
    """
    name = name.strip()
    if ExpenseCategory.objects.filter(name__iexact=name).exists():
        raise DuplicateCategoryError(f"Category '{name}' already exists")
    try:
        with transaction.atomic():
            return ExpenseCategory.objects.create(name=name, description=description)
    except IntegrityError as exc:
        raise DuplicateCategoryError(f"Category '{name}' already exists") from exc


@transaction.atomic
def delete_category(*, category_id: UUID) -> None:
    """
    Raises:
        CategoryNotFoundError: If category doesn't exist
        CategoryInUseError: If any expense still uses it
    """
    category = _get_category(category_id)
    try:
        category.delete()
    except ProtectedError as exc:
        raise CategoryInUseError(
            f"Category '{category.name}' still has expenses and cannot be deleted"
        ) from exc
