"""
Serializers for analytics app.

Input Serializers:
    DashboardQuerySerializer - Validates period, date range and limit

Response Serializers:
    DashboardResponseSerializer - Dashboard summary
"""

import calendar
from datetime import date

from rest_framework import serializers
from .analytics import RECENT_TRANSACTIONS_LIMIT, MAX_RECENT_TRANSACTIONS


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class DashboardQuerySerializer(serializers.Serializer):
    """
    Validate dashboard query parameters.

    Query Parameters:
        period (str): Month period in YYYY-MM format (e.g., '2025-06')
        start_date (date): Start of date range
        end_date (date): End of date range
        limit (int): Recent transactions per kind

    Note:
        If 'period' is provided, it takes precedence and is converted
        to start_date and end_date for the full month.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=MAX_RECENT_TRANSACTIONS,
        default=RECENT_TRANSACTIONS_LIMIT,
    )

    def validate(self, attrs):
        """Parse period into date range if provided."""
        period = attrs.pop('period', None)
        if period:
            year, month = (int(part) for part in period.split('-'))
            attrs['start_date'] = date(year, month, 1)
            attrs['end_date'] = date(year, month, calendar.monthrange(year, month)[1])

        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({
                'end_date': 'end_date must be after or equal to start_date'
            })

        return attrs


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class SalesTrendPointSerializer(serializers.Serializer):
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    online = serializers.DecimalField(max_digits=12, decimal_places=2)
    cash = serializers.DecimalField(max_digits=12, decimal_places=2)


class ExpenseBreakdownSerializer(serializers.Serializer):
    category = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()
    share = serializers.FloatField(help_text='Percentage of total expenses')


class PartnerBalanceSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class RecentTransactionSerializer(serializers.Serializer):
    id = serializers.CharField()
    from_partner = serializers.CharField()
    to_partner = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.CharField()
    transaction_date = serializers.DateField()


class RecentTransactionsSerializer(serializers.Serializer):
    business = RecentTransactionSerializer(many=True)
    personal = RecentTransactionSerializer(many=True)


class DashboardResponseSerializer(serializers.Serializer):
    """Response serializer for dashboard summary."""
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    currency = serializers.CharField()
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_online = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_cash = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_savings = serializers.DecimalField(max_digits=14, decimal_places=2)
    sales_trend = SalesTrendPointSerializer(many=True)
    expense_breakdown = ExpenseBreakdownSerializer(many=True)
    partner_balances = PartnerBalanceSerializer(many=True)
    recent_transactions = RecentTransactionsSerializer()


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()
