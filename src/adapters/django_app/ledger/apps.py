"""
Configuração do Django App do Ledger.
"""

from django.apps import AppConfig


class LedgerConfig(AppConfig):
    """Configuração do app Ledger."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.ledger'
    label = 'ledger'
    verbose_name = 'Contas e Transações'
