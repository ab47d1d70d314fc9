"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- Driven Ports (lado direito): UnitOfWork, EventPublisher, EventStore, AccountLock
- Driving Ports (lado esquerdo): Definidos nos Use Cases

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import ContextManager, List, Optional

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Garante que a conta e o lançamento no ledger sejam persistidos
    como uma única unidade: ou ambos são gravados ou nenhum é.

    Pattern: Context Manager
        with uow:
            account_repo.save(account)
            transaction_repo.save(transaction)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção

    Responsabilidades:
    - Gerenciar início/fim de transação
    - Commit/Rollback coordenado
    - Enfileirar eventos para publicação pós-commit
    - Garantir que eventos só são publicados após commit bem-sucedido
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """
        Inicia uma nova transação.

        Deve ser implementado pelo adapter específico
        (Django: transaction.atomic()).
        """
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Note:
            Eventos só são publicados após commit bem-sucedido.
            Se commit falhar, eventos são descartados.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Example:
            with uow:
                account_repo.save(account)
                uow.publish_event(AccountCreatedEvent(...))
            # Evento publicado aqui, após commit
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Retorna eventos enfileirados (para testing/debugging)."""
        return list(self._events)

    def clear_events(self) -> None:
        """Limpa fila de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Adapters implementam para integrar com diferentes
    sistemas de mensageria (Celery, logging, memória).
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class EventStore(ABC):
    """
    Interface para persistência de eventos.

    Mantém a trilha de auditoria de tudo que aconteceu com
    contas e transações.
    """

    @abstractmethod
    def append(self, event: DomainEvent, sequence: int) -> None:
        """
        Adiciona evento ao store.

        Args:
            event: Evento a ser persistido
            sequence: Posição do evento no histórico do agregado
        """
        raise NotImplementedError

    @abstractmethod
    def get_events_for_aggregate(self, aggregate_id: str) -> List[dict]:
        """Recupera eventos de um agregado em ordem de sequência."""
        raise NotImplementedError

    @abstractmethod
    def last_sequence(self, aggregate_id: str) -> int:
        """Última sequência gravada para o agregado (0 se nenhuma)."""
        raise NotImplementedError


class AccountLock(ABC):
    """
    Lock exclusivo por chave.

    Com o número da conta, serializa débitos e cancelamentos sobre a
    mesma conta, complementando o lock de linha do banco. Com a chave
    global ACCOUNT_NUMBER_LOCK_KEY, serializa a abertura de contas.

    Example:
        with account_lock.hold("1000000000"):
            ...
    """

    @abstractmethod
    def hold(self, account_number: str) -> ContextManager[None]:
        """
        Adquire o lock da conta enquanto o contexto estiver aberto.

        Raises:
            ConcurrencyError: Se o lock não for obtido no tempo de espera
        """
        raise NotImplementedError


ACCOUNT_NUMBER_LOCK_KEY = "__account_number__"


def hold_lock(account_lock: Optional[AccountLock], key: str) -> ContextManager[None]:
    """Contexto do lock, ou contexto nulo quando nenhum lock foi injetado."""
    if account_lock is None:
        return nullcontext()
    return account_lock.hold(key)
