"""
Analytics Module
=================

This module provides read-only aggregate queries for the partner dashboard.
It combines daily sales, shared expenses, partner balances and recent
ledger activity into a single summary.

Classes:
    AnalyticsQueries: Static methods for dashboard queries.

Key Features:
    - Sales totals with online/cash split
    - Expense totals and per-category breakdown
    - Net savings (sales minus expenses)
    - Daily sales trend for charts
    - Current partner balances
    - Most recent business and personal transactions

Example:
    Getting the dashboard for June::

        from apps.analytics.analytics import AnalyticsQueries

        data = AnalyticsQueries.dashboard(
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 30),
        )
        print(f"Sales: {data['total_sales']}")
        print(f"Net savings: {data['net_savings']}")

Note:
    This module is read-only and doesn't modify any data. All methods
    are static and can be called without instantiation.
"""

from django.conf import settings
from django.db.models import Sum, Count
from django.db.models.functions import Coalesce
from decimal import Decimal
from apps.partners.models import Partner
from apps.ledger.models import SaleEntry, BusinessTransaction, PersonalTransaction
from apps.expenses.models import Expense
from .exceptions import InvalidDateRangeError, InvalidLimitError


RECENT_TRANSACTIONS_LIMIT = 5
MAX_RECENT_TRANSACTIONS = 50


class AnalyticsQueries:
    """
    Aggregate queries for the analytics endpoints.

    Every method accepts an optional inclusive date range. Omitted bounds
    leave that side of the range open.

    Methods:
        sales_summary: Totals of sales in a range.
        sales_trend: Per-day sales for charts.
        expense_summary: Expense total and category breakdown.
        partner_balances: Current aggregate balance of each active partner.
        recent_transactions: Latest business and personal transactions.
        dashboard: Everything above in one payload.
    """

    @staticmethod
    def _validate_range(start_date, end_date):
        if start_date and end_date and start_date > end_date:
            raise InvalidDateRangeError("start_date must be before or equal to end_date")

    @staticmethod
    def _date_filter(field, start_date, end_date):
        filters = {}
        if start_date:
            filters[f'{field}__gte'] = start_date
        if end_date:
            filters[f'{field}__lte'] = end_date
        return filters

    @staticmethod
    def sales_summary(start_date=None, end_date=None):
        """
        Sum sales entries within the date range.

        Returns:
            dict: total, online, cash (Decimal) and days (int), the number
            of days that have a sales entry.
        """
        AnalyticsQueries._validate_range(start_date, end_date)
        sales = SaleEntry.objects.filter(
            **AnalyticsQueries._date_filter('date', start_date, end_date)
        )
        totals = sales.aggregate(
            total=Coalesce(Sum('amount'), Decimal('0.00')),
            online=Coalesce(Sum('online_amount'), Decimal('0.00')),
            cash=Coalesce(Sum('cash_amount'), Decimal('0.00')),
            days=Count('id'),
        )
        return totals

    @staticmethod
    def sales_trend(start_date=None, end_date=None):
        """
        Get per-day sales for line or bar charts.

        Days without a sales entry are not included; there is at most one
        entry per day so no grouping is needed.

        Returns:
            list[dict]: Ordered by date, each containing:
                - date (date)
                - amount (Decimal)
                - online (Decimal)
                - cash (Decimal)
        """
        AnalyticsQueries._validate_range(start_date, end_date)
        sales = SaleEntry.objects.filter(
            **AnalyticsQueries._date_filter('date', start_date, end_date)
        ).order_by('date')

        return [
            {
                'date': sale.date,
                'amount': sale.amount,
                'online': sale.online_amount,
                'cash': sale.cash_amount,
            }
            for sale in sales
        ]

    @staticmethod
    def expense_summary(start_date=None, end_date=None):
        """
        Total expenses and their breakdown per category.

        Returns:
            dict: Contains:
                - total (Decimal): Sum of all expenses in range.
                - breakdown (list[dict]): category, total, count and share
                  (percentage of the total, rounded to 1 decimal), largest
                  category first.
        """
        AnalyticsQueries._validate_range(start_date, end_date)
        expenses = Expense.objects.filter(
            **AnalyticsQueries._date_filter('expense_date', start_date, end_date)
        )
        total = expenses.aggregate(
            total=Coalesce(Sum('amount'), Decimal('0.00'))
        )['total']

        rows = expenses.values('category__name').annotate(
            total=Sum('amount'),
            count=Count('id'),
        ).order_by('-total', 'category__name')

        breakdown = []
        for row in rows:
            share = (row['total'] / total * 100) if total else Decimal('0')
            breakdown.append({
                'category': row['category__name'],
                'total': row['total'],
                'count': row['count'],
                'share': round(float(share), 1),
            })

        return {'total': total, 'breakdown': breakdown}

    @staticmethod
    def partner_balances():
        """Current aggregate balance of each active partner, by name."""
        partners = Partner.objects.filter(is_active=True).order_by('full_name', 'email')
        return [
            {
                'id': str(partner.id),
                'name': partner.get_display_name(),
                'balance': partner.balance,
            }
            for partner in partners
        ]

    @staticmethod
    def recent_transactions(limit=RECENT_TRANSACTIONS_LIMIT):
        """
        Latest business and personal transactions, newest first.

        Args:
            limit (int): How many of each kind to return (1-50).

        Returns:
            dict: 'business' and 'personal' lists of plain dicts.

        Raises:
            InvalidLimitError: If limit is outside 1-50.
        """
        if limit < 1 or limit > MAX_RECENT_TRANSACTIONS:
            raise InvalidLimitError(
                f"limit must be between 1 and {MAX_RECENT_TRANSACTIONS}"
            )

        def serialize(txn):
            return {
                'id': str(txn.id),
                'from_partner': txn.from_partner.get_display_name(),
                'to_partner': txn.to_partner.get_display_name(),
                'amount': txn.amount,
                'status': txn.status,
                'transaction_date': txn.transaction_date,
            }

        result = {}
        for key, model in (('business', BusinessTransaction), ('personal', PersonalTransaction)):
            txns = model.objects.select_related(
                'from_partner', 'to_partner'
            ).order_by('-created_at')[:limit]
            result[key] = [serialize(txn) for txn in txns]
        return result

    @staticmethod
    def dashboard(start_date=None, end_date=None, recent_limit=RECENT_TRANSACTIONS_LIMIT):
        """
        Build the full dashboard summary.

        Sales and expenses respect the date range; balances and recent
        transactions always reflect the current state of the ledger.

        Args:
            start_date (date, optional): Inclusive lower bound.
            end_date (date, optional): Inclusive upper bound.
            recent_limit (int, optional): Recent transactions per kind.

        Returns:
            dict: Contains:
                - start_date, end_date
                - currency (str): Display currency from LEDGER_CURRENCY.
                - total_sales, total_online, total_cash (Decimal)
                - total_expenses (Decimal)
                - net_savings (Decimal): total_sales - total_expenses.
                - sales_trend (list[dict])
                - expense_breakdown (list[dict])
                - partner_balances (list[dict])
                - recent_transactions (dict)

        Raises:
            InvalidDateRangeError: If start_date is after end_date.
        """
        sales = AnalyticsQueries.sales_summary(start_date, end_date)
        expenses = AnalyticsQueries.expense_summary(start_date, end_date)

        return {
            'start_date': start_date,
            'end_date': end_date,
            'currency': settings.LEDGER_CURRENCY,
            'total_sales': sales['total'],
            'total_online': sales['online'],
            'total_cash': sales['cash'],
            'total_expenses': expenses['total'],
            'net_savings': sales['total'] - expenses['total'],
            'sales_trend': AnalyticsQueries.sales_trend(start_date, end_date),
            'expense_breakdown': expenses['breakdown'],
            'partner_balances': AnalyticsQueries.partner_balances(),
            'recent_transactions': AnalyticsQueries.recent_transactions(recent_limit),
        }
