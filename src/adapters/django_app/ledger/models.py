"""
Django Models para os domínios de Contas e Transações.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/accounts e src/core/transactions.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- AccountUserModel: Titulares de contas
- AccountModel: Contas (número único, saldo não negativo)
- TransactionModel: Ledger de lançamentos (somente inclusão)
- DomainEventModel: Event Store (trilha de auditoria)
"""

from django.db import models


class AccountStatusChoices(models.TextChoices):
    """Espelha AccountStatus do Core."""
    IN_USE = 'IN_USE', 'Em uso'
    UNREGISTERED = 'UNREGISTERED', 'Encerrada'


class TransactionTypeChoices(models.TextChoices):
    """Espelha TransactionType do Core."""
    USE = 'USE', 'Uso'
    CANCEL = 'CANCEL', 'Cancelamento'


class TransactionResultChoices(models.TextChoices):
    """Espelha TransactionResult do Core."""
    SUCCESS = 'SUCCESS', 'Sucesso'
    FAIL = 'FAIL', 'Falha'


class AccountUserModel(models.Model):
    """
    Titular de contas.

    Mantido por outro sistema; o ledger apenas consulta.
    """

    name = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'account_users'
        verbose_name = 'Titular'
        verbose_name_plural = 'Titulares'
        ordering = ['id']

    def __str__(self):
        return f"{self.name} ({self.pk})"


class AccountModel(models.Model):
    """
    Model Django para persistência de Contas.

    Fields:
        owner: Titular (FK, PROTECT - contas nunca são removidas)
        account_number: Número da conta (único)
        balance: Saldo na menor unidade monetária (>= 0 no banco)
        status: IN_USE ou UNREGISTERED
        registered_at: Abertura
        unregistered_at: Encerramento
    """

    owner = models.ForeignKey(
        AccountUserModel,
        on_delete=models.PROTECT,
        related_name='accounts',
    )
    account_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Número da conta (string numérica)"
    )
    balance = models.PositiveBigIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=AccountStatusChoices.choices,
        default=AccountStatusChoices.IN_USE,
        db_index=True,
    )
    registered_at = models.DateTimeField()
    unregistered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'accounts'
        verbose_name = 'Conta'
        verbose_name_plural = 'Contas'
        ordering = ['id']

    def __str__(self):
        return f"{self.account_number} [{self.status}]"


class TransactionModel(models.Model):
    """
    Model Django para o ledger de lançamentos.

    Linhas nunca são alteradas depois de incluídas.
    """

    account = models.ForeignKey(
        AccountModel,
        on_delete=models.PROTECT,
        related_name='transactions',
    )
    transaction_id = models.CharField(
        max_length=32,
        unique=True,
        help_text="Identificador externo (UUID4 hex)"
    )
    transaction_type = models.CharField(
        max_length=10,
        choices=TransactionTypeChoices.choices,
    )
    transaction_result = models.CharField(
        max_length=10,
        choices=TransactionResultChoices.choices,
    )
    amount = models.PositiveBigIntegerField()
    balance_snapshot = models.PositiveBigIntegerField()
    transacted_at = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'transactions'
        verbose_name = 'Transação'
        verbose_name_plural = 'Transações'
        ordering = ['id']
        indexes = [
            models.Index(fields=['account', 'transacted_at'], name='transactions_acct_at_idx'),
        ]

    def __str__(self):
        return (
            f"{self.transaction_type}/{self.transaction_result} "
            f"{self.amount} - {self.transaction_id[:8]}"
        )


class DomainEventModel(models.Model):
    """
    Event Store genérico para Domain Events.

    Persiste todos os eventos de domínio para auditoria e replay.
    aggregate_id é o número da conta.
    """

    event_id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="UUID único do evento"
    )
    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do evento (ex: BalanceUsedEvent)"
    )
    aggregate_type = models.CharField(max_length=100, db_index=True)
    aggregate_id = models.CharField(max_length=36, db_index=True)
    event_data = models.JSONField(default=dict)
    version = models.IntegerField(default=1)
    sequence = models.BigIntegerField(
        default=0,
        help_text="Sequência do evento no agregado"
    )
    occurred_at = models.DateTimeField()
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Evento de Domínio'
        verbose_name_plural = 'Eventos de Domínio'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'sequence'], name='domain_events_agg_seq_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='domain_events_type_rec_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id} @ {self.occurred_at}"
