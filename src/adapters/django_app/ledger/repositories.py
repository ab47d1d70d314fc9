"""
Repositórios Django para persistência de usuários, contas e transações.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar os Protocols de src/core/accounts/ports.py e
  src/core/transactions/ports.py
- Mapear entities para models e vice-versa
- Locks de linha (select_for_update) quando o Core pede for_update

Note:
    select_for_update só tem efeito dentro de uma transação, isto é,
    dentro do DjangoUnitOfWork. No SQLite é ignorado (o banco já
    serializa escritas).
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional
import logging

from django.db.models import Max

from src.core.accounts.entities import AccountEntity, UserEntity
from src.core.transactions.entities import TransactionEntity
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventStore

from .models import AccountModel, AccountUserModel, DomainEventModel, TransactionModel
from .mappers import AccountMapper, DomainEventMapper, TransactionMapper, UserMapper

logger = logging.getLogger(__name__)


class DjangoUserRepository:
    """Consulta de titulares via ORM."""

    def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        model = AccountUserModel.objects.filter(pk=user_id).first()
        return UserMapper.to_entity(model) if model else None


class DjangoAccountRepository:
    """
    Implementação Django do AccountRepository.

    Example:
        repo = DjangoAccountRepository()
        account = repo.get_by_account_number("1000000000", for_update=True)
        account.debit(200)
        repo.save(account)
    """

    def _queryset(self, for_update: bool = False):
        queryset = AccountModel.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        return queryset

    def get_by_id(self, account_id: int) -> Optional[AccountEntity]:
        model = AccountModel.objects.filter(pk=account_id).first()
        return AccountMapper.to_entity(model) if model else None

    def get_by_account_number(
        self,
        account_number: str,
        for_update: bool = False,
    ) -> Optional[AccountEntity]:
        model = self._queryset(for_update).filter(account_number=account_number).first()
        return AccountMapper.to_entity(model) if model else None

    def list_by_owner(self, user_id: int) -> List[AccountEntity]:
        models = AccountModel.objects.filter(owner_id=user_id).order_by('id')
        return AccountMapper.to_entity_list(list(models))

    def count_by_owner(self, user_id: int) -> int:
        return AccountModel.objects.filter(owner_id=user_id).count()

    def get_latest(self, for_update: bool = False) -> Optional[AccountEntity]:
        model = self._queryset(for_update).order_by('-id').first()
        return AccountMapper.to_entity(model) if model else None

    def save(self, account: AccountEntity) -> AccountEntity:
        """
        Persiste conta (create ou update).

        Na criação o id gerado pelo banco é copiado para a entidade.
        """
        if account.id is None:
            model = AccountMapper.to_model(account)
            model.save(force_insert=True)
            account.id = model.pk
            logger.info(f"Account inserted: {account.account_number} (id={account.id})")
            return account

        model = AccountModel.objects.get(pk=account.id)
        AccountMapper.update_model(model, account)
        model.save(update_fields=['balance', 'status', 'unregistered_at', 'updated_at'])
        logger.debug(f"Account updated: {account.account_number} balance={account.balance}")
        return account


class DjangoTransactionRepository:
    """
    Implementação Django do TransactionRepository.

    O ledger é somente inclusão: save() nunca atualiza uma linha.
    """

    def get_by_transaction_id(self, transaction_id: str) -> Optional[TransactionEntity]:
        model = (
            TransactionModel.objects
            .select_related('account')
            .filter(transaction_id=transaction_id)
            .first()
        )
        return TransactionMapper.to_entity(model) if model else None

    def save(self, transaction: TransactionEntity) -> TransactionEntity:
        model = TransactionMapper.to_model(transaction)
        model.save(force_insert=True)
        logger.info(
            f"Transaction stored: {transaction.transaction_id} "
            f"{transaction.transaction_type.value}/{transaction.result.value}"
        )
        return replace(transaction, id=model.pk)

    def list_by_account(self, account_number: str) -> List[TransactionEntity]:
        models = (
            TransactionModel.objects
            .select_related('account')
            .filter(account__account_number=account_number)
            .order_by('id')
        )
        return [TransactionMapper.to_entity(model) for model in models]


class DjangoEventStore(EventStore):
    """
    Event Store usando Django ORM.

    Persiste Domain Events para auditoria e replay.
    """

    def append(self, event: DomainEvent, sequence: int = 0) -> None:
        DomainEventMapper.to_model(event=event, sequence=sequence).save(force_insert=True)
        logger.debug(f"Event stored: {event.event_type} for {event.aggregate_id}")

    def get_events_for_aggregate(self, aggregate_id: str) -> List[Dict[str, Any]]:
        events = (
            DomainEventModel.objects
            .filter(aggregate_id=aggregate_id)
            .order_by('sequence')
        )
        return [DomainEventMapper.to_dict(e) for e in events]

    def last_sequence(self, aggregate_id: str) -> int:
        result = (
            DomainEventModel.objects
            .filter(aggregate_id=aggregate_id)
            .aggregate(last=Max('sequence'))
        )
        return result['last'] or 0
