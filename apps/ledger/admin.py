from django.contrib import admin
from django.utils.html import format_html
from .models import (
    SaleEntry,
    BusinessTransaction,
    PersonalTransaction,
    PairwiseBalance,
    RecurringTransactionRule,
    TransactionStatus,
)


STATUS_COLOURS = {
    TransactionStatus.PENDING: ('#E5C49A', '#2C1810'),
    TransactionStatus.APPROVED: ('#6B8E5E', 'white'),
    TransactionStatus.REJECTED: ('#B85C5C', 'white'),
}


@admin.register(SaleEntry)
class SaleEntryAdmin(admin.ModelAdmin):
    """
    Sale entries are read-only here: editing through the admin would
    bypass the balance update. Use the API or the services instead.
    """

    list_display = ['date', 'partner', 'online_amount', 'cash_amount', 'amount', 'created_by']
    list_filter = ['date', 'partner']
    search_fields = ['notes', 'partner__email', 'partner__full_name']
    date_hierarchy = 'date'
    ordering = ['-date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class TransactionAdmin(admin.ModelAdmin):
    """Read-only transaction listing with status badges."""

    list_display = [
        'transaction_date',
        'from_partner',
        'to_partner',
        'amount',
        'status_badge',
        'approved_by',
        'approved_at',
    ]
    list_filter = ['status', 'transaction_date']
    search_fields = ['description', 'from_partner__email', 'to_partner__email']
    date_hierarchy = 'transaction_date'

    def status_badge(self, obj):
        """Display approval status as colored badge."""
        bg, fg = STATUS_COLOURS.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BusinessTransaction)
class BusinessTransactionAdmin(TransactionAdmin):
    pass


@admin.register(PersonalTransaction)
class PersonalTransactionAdmin(TransactionAdmin):
    list_display = TransactionAdmin.list_display + ['transaction_type', 'category']
    list_filter = TransactionAdmin.list_filter + ['transaction_type']


@admin.register(PairwiseBalance)
class PairwiseBalanceAdmin(admin.ModelAdmin):
    list_display = ['partner_a', 'partner_b', 'balance_amount', 'last_updated']
    readonly_fields = ['partner_a', 'partner_b', 'balance_amount', 'last_updated']

    def has_add_permission(self, request):
        return False


@admin.register(RecurringTransactionRule)
class RecurringTransactionRuleAdmin(admin.ModelAdmin):
    list_display = [
        'from_partner',
        'to_partner',
        'amount',
        'frequency',
        'next_execution_date',
        'end_date',
        'is_active',
    ]
    list_filter = ['frequency', 'is_active']
    actions = ['pause_rules', 'resume_rules']

    @admin.action(description='Pause selected rules')
    def pause_rules(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'Paused {count} rule(s).')

    @admin.action(description='Resume selected rules')
    def resume_rules(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Resumed {count} rule(s).')
