from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import Partner


@admin.register(Partner)
class PartnerAdmin(BaseUserAdmin):
    """
    Admin interface for partners.

    The balance is shown but never editable here; use the
    reconcile_balances command to correct drift.
    """

    list_display = [
        'email',
        'full_name',
        'balance_display',
        'is_active',
        'is_staff',
        'created_at',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'full_name',
    ]

    ordering = ['full_name', 'email']

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'full_name', 'password')
        }),
        ('Ledger', {
            'fields': ('balance',),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create Partner', {
            'classes': ('wide',),
            'fields': ('email', 'full_name', 'password1', 'password2'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser'),
        }),
    )

    readonly_fields = [
        'balance',
        'created_at',
        'updated_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def balance_display(self, obj):
        """Colour the balance by sign."""
        colour = '#B85C5C' if obj.balance < 0 else '#6B8E5E'
        return format_html('<span style="color: {};">{}</span>', colour, obj.balance)
    balance_display.short_description = 'Balance'
    balance_display.admin_order_field = 'balance'
