from decimal import Decimal

from rest_framework import serializers

from apps.partners.serializers import PartnerMinimalSerializer
from .models import (
    SaleEntry,
    BusinessTransaction,
    PersonalTransaction,
    PersonalTransactionType,
    RecurrenceFrequency,
    RecurringTransactionRule,
)


# =============================================================================
# Sales
# =============================================================================

class SaleEntrySerializer(serializers.ModelSerializer):
    """Sale entry output."""

    partner = PartnerMinimalSerializer(read_only=True)
    created_by = PartnerMinimalSerializer(read_only=True)

    class Meta:
        model = SaleEntry
        fields = [
            'id',
            'date',
            'partner',
            'online_amount',
            'cash_amount',
            'amount',
            'notes',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SaleEntryWriteSerializer(serializers.Serializer):
    """Input for creating or editing a sale entry."""

    date = serializers.DateField()
    partner_id = serializers.UUIDField(required=False, allow_null=True)
    online_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    cash_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    notes = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Transactions
# =============================================================================

class TransactionSerializer(serializers.ModelSerializer):
    """Business transaction output."""

    from_partner = PartnerMinimalSerializer(read_only=True)
    to_partner = PartnerMinimalSerializer(read_only=True)
    approved_by = PartnerMinimalSerializer(read_only=True)

    class Meta:
        model = BusinessTransaction
        fields = [
            'id',
            'from_partner',
            'to_partner',
            'amount',
            'description',
            'transaction_date',
            'status',
            'approved_by',
            'approved_at',
            'rejection_reason',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PersonalTransactionSerializer(TransactionSerializer):
    """Personal transaction output."""

    class Meta(TransactionSerializer.Meta):
        model = PersonalTransaction
        fields = TransactionSerializer.Meta.fields + [
            'transaction_type',
            'category',
            'recurring_rule',
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    """Input for a new transfer; the sender is always the caller."""

    to_partner_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    transaction_date = serializers.DateField(required=False)


class PersonalTransactionCreateSerializer(TransactionCreateSerializer):
    transaction_type = serializers.ChoiceField(
        choices=PersonalTransactionType.choices,
        default=PersonalTransactionType.TRANSFER,
    )
    category = serializers.CharField(required=False, default='general', max_length=50)


class TransactionUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'), required=False)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)
    transaction_date = serializers.DateField(required=False)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Balances
# =============================================================================

class BalanceSerializer(serializers.Serializer):
    partner_id = serializers.UUIDField()
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class PairwiseBalanceSerializer(serializers.Serializer):
    """One counterparty's personal balance from the caller's point of view."""

    counterparty = PartnerMinimalSerializer()
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    last_updated = serializers.DateTimeField()


class PairBalanceSerializer(serializers.Serializer):
    partner_a_id = serializers.UUIDField()
    partner_b_id = serializers.UUIDField()
    balance_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


# =============================================================================
# Recurring rules
# =============================================================================

class RecurringRuleSerializer(serializers.ModelSerializer):
    from_partner = PartnerMinimalSerializer(read_only=True)
    to_partner = PartnerMinimalSerializer(read_only=True)

    class Meta:
        model = RecurringTransactionRule
        fields = [
            'id',
            'from_partner',
            'to_partner',
            'amount',
            'transaction_type',
            'description',
            'category',
            'frequency',
            'start_date',
            'end_date',
            'next_execution_date',
            'is_active',
            'created_at',
        ]
        read_only_fields = fields


class RecurringRuleCreateSerializer(serializers.Serializer):
    to_partner_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    frequency = serializers.ChoiceField(choices=RecurrenceFrequency.choices)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    transaction_type = serializers.ChoiceField(
        choices=PersonalTransactionType.choices,
        default=PersonalTransactionType.TRANSFER,
    )
    description = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    category = serializers.CharField(required=False, default='general', max_length=50)


class RuleActiveSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class RunRulesSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
