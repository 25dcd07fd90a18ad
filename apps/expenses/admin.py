from django.contrib import admin
from django.db.models import Count
from .models import Expense, ExpenseCategory


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'expense_count']
    search_fields = ['name']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_expense_count=Count('expenses'))

    def expense_count(self, obj):
        return obj._expense_count
    expense_count.short_description = 'Expenses'
    expense_count.admin_order_field = '_expense_count'


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_date', 'category', 'amount', 'description', 'created_by']
    list_filter = ['category', 'expense_date']
    search_fields = ['description', 'category__name']
    date_hierarchy = 'expense_date'
    ordering = ['-expense_date']
