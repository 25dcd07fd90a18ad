from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class TransactionStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class PersonalTransactionType(models.TextChoices):
    BORROW = 'borrow', 'Borrow'
    LEND = 'lend', 'Lend'
    PAYMENT = 'payment', 'Payment'
    TRANSFER = 'transfer', 'Transfer'


class RecurrenceFrequency(models.TextChoices):
    DAILY = 'daily', 'Daily'
    WEEKLY = 'weekly', 'Weekly'
    MONTHLY = 'monthly', 'Monthly'
    YEARLY = 'yearly', 'Yearly'


class SaleEntry(models.Model):
    """
    One day's takings for the business.

    At most one entry exists per date. When ``partner`` is set, the
    sale amount is credited to that partner's balance.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    date = models.DateField(unique=True)
    partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales',
    )
    online_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    cash_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text='online_amount + cash_amount',
    )
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_sales',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sale_entries'
        ordering = ['-date']
        verbose_name_plural = 'sale entries'
        indexes = [
            models.Index(fields=['partner', 'date'], name='sale_partner_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(online_amount__gte=0) & Q(cash_amount__gte=0),
                name='sale_amounts_non_negative',
            ),
        ]

    def __str__(self):
        return f"Sale {self.date}: {self.amount}"

    def save(self, *args, **kwargs):
        self.amount = (self.online_amount or Decimal('0')) + (self.cash_amount or Decimal('0'))
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'amount' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['amount']
        super().save(*args, **kwargs)


class Transaction(models.Model):
    """
    Transfer of money from one partner to another awaiting the
    receiver's approval. Only approved rows affect balances.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    from_partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='%(class)s_sent',
    )
    to_partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='%(class)s_received',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    description = models.CharField(max_length=255, blank=True)
    transaction_date = models.DateField(default=timezone.localdate)

    # Approval
    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='%(class)s_reviewed',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-transaction_date', '-created_at']
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_partner=F('to_partner')),
                name='%(app_label)s_%(class)s_distinct_parties',
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='%(app_label)s_%(class)s_amount_positive',
            ),
            models.CheckConstraint(
                condition=(
                    Q(status=TransactionStatus.PENDING, approved_by__isnull=True, approved_at__isnull=True)
                    | Q(status=TransactionStatus.APPROVED, approved_by__isnull=False, approved_at__isnull=False)
                    | Q(status=TransactionStatus.REJECTED, approved_by__isnull=False)
                ),
                name='%(app_label)s_%(class)s_approval_consistent',
            ),
        ]

    def __str__(self):
        return f"{self.from_partner} -> {self.to_partner}: {self.amount} ({self.status})"

    @property
    def is_approved(self):
        return self.status == TransactionStatus.APPROVED

    def involves(self, partner_id):
        """Check whether the partner is sender or receiver."""
        return partner_id in (self.from_partner_id, self.to_partner_id)


class BusinessTransaction(Transaction):
    """Business-wide transfer; moves the partners' aggregate balances."""

    class Meta(Transaction.Meta):
        db_table = 'business_transactions'
        indexes = [
            models.Index(fields=['to_partner', 'status'], name='biz_txn_receiver_status_idx'),
            models.Index(fields=['from_partner', 'status'], name='biz_txn_sender_status_idx'),
        ]


class PersonalTransaction(Transaction):
    """Personal transfer; moves only the pairwise balance of the two partners."""

    transaction_type = models.CharField(
        max_length=20,
        choices=PersonalTransactionType.choices,
        default=PersonalTransactionType.TRANSFER,
    )
    category = models.CharField(max_length=50, default='general')
    recurring_rule = models.ForeignKey(
        'ledger.RecurringTransactionRule',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_transactions',
    )

    class Meta(Transaction.Meta):
        db_table = 'personal_transactions'
        indexes = [
            models.Index(fields=['to_partner', 'status'], name='pers_txn_receiver_status_idx'),
            models.Index(fields=['from_partner', 'status'], name='pers_txn_sender_status_idx'),
        ]


class PairwiseBalance(models.Model):
    """
    Running personal balance between two partners.

    The pair is stored once, with ``partner_a`` the lower id. A transfer
    from ``partner_a`` to ``partner_b`` lowers ``balance_amount``; a
    transfer the other way raises it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    partner_a = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='pairwise_balances_as_a',
    )
    partner_b = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='pairwise_balances_as_b',
    )
    balance_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
    )
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pairwise_balances'
        ordering = ['partner_a', 'partner_b']
        constraints = [
            models.UniqueConstraint(
                fields=['partner_a', 'partner_b'],
                name='unique_partner_pair',
            ),
            models.CheckConstraint(
                condition=Q(partner_a__lt=F('partner_b')),
                name='pairwise_partners_ordered',
            ),
        ]

    def __str__(self):
        return f"{self.partner_a} / {self.partner_b}: {self.balance_amount}"

    def balance_for(self, partner_id):
        """Balance as seen by one side of the pair."""
        if partner_id == self.partner_a_id:
            return self.balance_amount
        return -self.balance_amount


class RecurringTransactionRule(models.Model):
    """Schedule that generates pending personal transactions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    from_partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='recurring_rules_sent',
    )
    to_partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='recurring_rules_received',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    transaction_type = models.CharField(
        max_length=20,
        choices=PersonalTransactionType.choices,
        default=PersonalTransactionType.TRANSFER,
    )
    description = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=50, default='general')

    frequency = models.CharField(max_length=10, choices=RecurrenceFrequency.choices)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    next_execution_date = models.DateField()
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_recurring_rules',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'recurring_transaction_rules'
        ordering = ['next_execution_date']
        indexes = [
            models.Index(fields=['is_active', 'next_execution_date'], name='rule_due_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_partner=F('to_partner')),
                name='rule_distinct_parties',
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='rule_amount_positive',
            ),
        ]

    def __str__(self):
        return f"{self.get_frequency_display()} {self.amount} {self.from_partner} -> {self.to_partner}"
