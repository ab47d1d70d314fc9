"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- AccountModel ↔ AccountEntity
- AccountUserModel → UserEntity
- TransactionModel ↔ TransactionEntity
- DomainEvent → DomainEventModel (Event Store)

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
"""

from typing import List

from src.core.accounts.entities import AccountEntity, AccountStatus, UserEntity
from src.core.transactions.entities import (
    TransactionEntity,
    TransactionResult,
    TransactionType,
)
from src.core.shared.events import DomainEvent

from .models import (
    AccountModel,
    AccountUserModel,
    DomainEventModel,
    TransactionModel,
)


class UserMapper:

    @staticmethod
    def to_entity(model: AccountUserModel) -> UserEntity:
        return UserEntity(id=model.pk, name=model.name)


class AccountMapper:
    """
    Mapper para conversão entre AccountEntity e AccountModel.

    - to_model(): Entity → Model (não salva)
    - to_entity(): Model → Entity
    - update_model(): copia o estado mutável da Entity para o Model
    """

    @staticmethod
    def to_model(entity: AccountEntity) -> AccountModel:
        return AccountModel(
            id=entity.id,
            owner_id=entity.owner_user_id,
            account_number=entity.account_number,
            balance=entity.balance,
            status=entity.status.value,
            registered_at=entity.registered_at,
            unregistered_at=entity.unregistered_at,
        )

    @staticmethod
    def to_entity(model: AccountModel) -> AccountEntity:
        """
        Converte AccountModel para AccountEntity.

        Note:
            Bypassa AccountEntity.open() pois os dados já foram
            validados na abertura
        """
        return AccountEntity(
            id=model.pk,
            owner_user_id=model.owner_id,
            account_number=model.account_number,
            balance=model.balance,
            status=AccountStatus(model.status),
            registered_at=model.registered_at,
            unregistered_at=model.unregistered_at,
        )

    @staticmethod
    def to_entity_list(models: List[AccountModel]) -> List[AccountEntity]:
        return [AccountMapper.to_entity(model) for model in models]

    @staticmethod
    def update_model(model: AccountModel, entity: AccountEntity) -> AccountModel:
        # Número, titular e abertura são imutáveis
        model.balance = entity.balance
        model.status = entity.status.value
        model.unregistered_at = entity.unregistered_at
        return model


class TransactionMapper:
    """Mapper para conversão entre TransactionEntity e TransactionModel."""

    @staticmethod
    def to_model(entity: TransactionEntity) -> TransactionModel:
        return TransactionModel(
            id=entity.id,
            account_id=entity.account_id,
            transaction_id=entity.transaction_id,
            transaction_type=entity.transaction_type.value,
            transaction_result=entity.result.value,
            amount=entity.amount,
            balance_snapshot=entity.balance_snapshot,
            transacted_at=entity.transacted_at,
        )

    @staticmethod
    def to_entity(model: TransactionModel) -> TransactionEntity:
        """
        Converte TransactionModel para TransactionEntity.

        Note:
            Espera o model carregado com select_related('account')
            para evitar uma query extra pelo número da conta
        """
        return TransactionEntity(
            id=model.pk,
            account_id=model.account_id,
            account_number=model.account.account_number,
            transaction_id=model.transaction_id,
            transaction_type=TransactionType(model.transaction_type),
            result=TransactionResult(model.transaction_result),
            amount=model.amount,
            balance_snapshot=model.balance_snapshot,
            transacted_at=model.transacted_at,
        )


class DomainEventMapper:
    """Mapper para persistir eventos no Event Store."""

    @staticmethod
    def to_model(event: DomainEvent, sequence: int = 0) -> DomainEventModel:
        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=event._get_event_data(),
            version=event.version,
            sequence=sequence,
            occurred_at=event.occurred_at,
        )

    @staticmethod
    def to_dict(model: DomainEventModel) -> dict:
        return {
            'event_id': model.event_id,
            'event_type': model.event_type,
            'aggregate_type': model.aggregate_type,
            'aggregate_id': model.aggregate_id,
            'event_data': model.event_data,
            'sequence': model.sequence,
            'occurred_at': model.occurred_at,
        }
