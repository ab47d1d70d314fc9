"""
Django Admin para o ledger.

Contas e usuários podem ser consultados; lançamentos e eventos são
somente leitura, pois o ledger é append-only.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import AccountUserModel, AccountModel, TransactionModel, DomainEventModel


def _badge(color: str, text: str):
    return format_html(
        '<span style="background-color: {}; color: white; padding: 3px 8px; '
        'border-radius: 3px; font-size: 11px;">{}</span>',
        color,
        text
    )


class ReadOnlyAdmin(admin.ModelAdmin):
    """Admin sem inclusão, edição ou remoção."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AccountUserModel)
class AccountUserAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'created_at']
    search_fields = ['id', 'name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['id']


@admin.register(AccountModel)
class AccountAdmin(admin.ModelAdmin):
    """Admin para AccountModel."""

    list_display = [
        'account_number',
        'owner',
        'balance',
        'status_badge',
        'registered_at',
        'unregistered_at',
    ]

    list_filter = ['status', 'registered_at']

    search_fields = ['account_number', 'owner__name']

    readonly_fields = [
        'account_number',
        'owner',
        'balance',
        'status',
        'registered_at',
        'unregistered_at',
        'created_at',
        'updated_at',
    ]

    ordering = ['-id']

    date_hierarchy = 'registered_at'

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        color = '#28a745' if obj.status == 'IN_USE' else '#343a40'
        return _badge(color, obj.get_status_display())
    status_badge.short_description = 'Status'


@admin.register(TransactionModel)
class TransactionAdmin(ReadOnlyAdmin):
    """Admin para lançamentos do ledger."""

    list_display = [
        'transaction_id_curto',
        'account',
        'transaction_type',
        'result_badge',
        'amount',
        'balance_snapshot',
        'transacted_at',
    ]

    list_filter = ['transaction_type', 'transaction_result', 'transacted_at']

    search_fields = ['transaction_id', 'account__account_number']

    list_select_related = ['account']

    ordering = ['-transacted_at']

    date_hierarchy = 'transacted_at'

    def transaction_id_curto(self, obj):
        """Exibe identificador curto."""
        return obj.transaction_id[:8] + '...'
    transaction_id_curto.short_description = 'Transaction'

    def result_badge(self, obj):
        color = '#28a745' if obj.transaction_result == 'SUCCESS' else '#dc3545'
        return _badge(color, obj.get_transaction_result_display())
    result_badge.short_description = 'Resultado'


@admin.register(DomainEventModel)
class DomainEventAdmin(ReadOnlyAdmin):
    """Admin para eventos de domínio."""

    list_display = [
        'event_id_curto',
        'event_type',
        'aggregate_type',
        'aggregate_id',
        'sequence',
        'occurred_at',
    ]

    list_filter = ['event_type', 'aggregate_type', 'occurred_at']

    search_fields = ['event_id', 'aggregate_id', 'event_type']

    def event_id_curto(self, obj):
        """Exibe ID do evento curto."""
        return obj.event_id[:8] + '...'
    event_id_curto.short_description = 'Event ID'
