# ==========================================
# apps/transactions/admin.py
# ==========================================

from django.contrib import admin
from apps.transactions.models import Transaction, TransactionDetail


class TransactionDetailInline(admin.TabularInline):
    """Inline admin for transaction details."""
    model = TransactionDetail
    extra = 0
    fields = ['recipient', 'amount']
    raw_id_fields = ['recipient']


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin interface for Transactions."""

    list_display = [
        'id',
        'group',
        'amount',
        'payer',
        'created_by',
        'is_repayment',
        'created_at',
    ]
    list_filter = ['created_at']
    search_fields = ['description', 'group__name', 'payer__username', 'created_by__username']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['group', 'payer', 'created_by']
    inlines = [TransactionDetailInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    @admin.display(boolean=True, description='Repayment')
    def is_repayment(self, obj):
        return obj.is_repayment

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('group', 'payer', 'created_by')
