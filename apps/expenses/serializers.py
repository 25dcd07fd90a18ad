from decimal import Decimal

from rest_framework import serializers

from apps.partners.serializers import PartnerMinimalSerializer
from .models import Expense, ExpenseCategory


class ExpenseCategorySerializer(serializers.ModelSerializer):
    expense_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'description', 'expense_count', 'created_at']
        read_only_fields = ['id', 'expense_count', 'created_at']


class ExpenseSerializer(serializers.ModelSerializer):
    """Expense output with category name."""

    category_name = serializers.CharField(source='category.name', read_only=True)
    created_by = PartnerMinimalSerializer(read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'category',
            'category_name',
            'amount',
            'description',
            'expense_date',
            'receipt_url',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ExpenseWriteSerializer(serializers.Serializer):
    category_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255)
    expense_date = serializers.DateField(required=False)
    receipt_url = serializers.URLField(required=False, allow_blank=True)
