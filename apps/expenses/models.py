from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


DEFAULT_CATEGORIES = [
    ('Utilities', 'Electricity, water, internet'),
    ('Rent', 'Shop and storage rent'),
    ('Supplies', 'Stock and consumables'),
    ('Marketing', 'Advertising and promotion'),
    ('Transportation', 'Fuel, delivery and travel'),
    ('Professional Services', 'Accounting, legal and consulting'),
    ('Insurance', 'Business insurance premiums'),
    ('Maintenance', 'Repairs and upkeep'),
    ('Other', 'Anything else'),
]


class ExpenseCategory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expense_categories'
        ordering = ['name']
        verbose_name_plural = 'expense categories'

    def __str__(self):
        return self.name


class Expense(models.Model):
    """A business expense. Expenses are reported but never touch partner balances."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.PROTECT,
        related_name='expenses',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    description = models.CharField(max_length=255)
    expense_date = models.DateField(default=timezone.localdate)
    receipt_url = models.URLField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['expense_date'], name='expense_date_idx'),
            models.Index(fields=['category', 'expense_date'], name='expense_category_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='expense_amount_positive'),
        ]

    def __str__(self):
        return f"{self.expense_date} {self.category}: {self.amount}"
