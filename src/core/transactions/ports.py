"""
Ports (Interfaces) do Domínio de Transações.

Tipos de Ports:
- TransactionRepository: Persistência do ledger (somente inclusão)
- InMemoryAccountLock: Lock por conta para um único processo
"""

from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Protocol, runtime_checkable
import threading

from src.core.shared.exceptions import ConcurrencyError
from src.core.shared.interfaces import AccountLock

from .entities import TransactionEntity


@runtime_checkable
class TransactionRepository(Protocol):
    """
    Interface para persistência de Transações.

    Lançamentos nunca são alterados nem removidos: ``save`` só inclui.
    """

    def get_by_transaction_id(self, transaction_id: str) -> Optional[TransactionEntity]:
        ...

    def save(self, transaction: TransactionEntity) -> TransactionEntity:
        """
        Inclui o lançamento.

        Returns:
            O lançamento salvo, com id atribuído
        """
        ...


class InMemoryTransactionRepository:
    """Implementação em memória do TransactionRepository (para testes)."""

    def __init__(self):
        self._transactions: Dict[str, TransactionEntity] = {}
        self._next_id = 1

    def get_by_transaction_id(self, transaction_id: str) -> Optional[TransactionEntity]:
        return self._transactions.get(transaction_id)

    def save(self, transaction: TransactionEntity) -> TransactionEntity:
        if transaction.transaction_id in self._transactions:
            raise ValueError(f"Transação duplicada: {transaction.transaction_id}")
        if transaction.id is None:
            transaction = replace(transaction, id=self._next_id)
        self._next_id = max(self._next_id, transaction.id + 1)
        self._transactions[transaction.transaction_id] = transaction
        return transaction

    def list_by_account(self, account_number: str) -> List[TransactionEntity]:
        return [
            t for t in self._transactions.values()
            if t.account_number == account_number
        ]

    def list_all(self) -> List[TransactionEntity]:
        return list(self._transactions.values())


class InMemoryAccountLock(AccountLock):
    """
    Lock por chave usando threading.Lock.

    A entrada de uma chave é descartada quando nenhuma thread a segura
    ou espera por ela.

    Válido apenas dentro de um processo. Para múltiplos workers use
    o CacheAccountLock do adapter Django.

    Example:
        lock = InMemoryAccountLock(wait_timeout=3)
        with lock.hold("1000000000"):
            ...
    """

    def __init__(self, wait_timeout: float = 3.0):
        self.wait_timeout = wait_timeout
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, account_number: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(account_number, threading.Lock())
            self._users[account_number] = self._users.get(account_number, 0) + 1

        try:
            if not lock.acquire(timeout=self.wait_timeout):
                raise ConcurrencyError(
                    f"Conta {account_number} está em uso por outra transação"
                )
            try:
                yield
            finally:
                lock.release()
        finally:
            self._forget(account_number)

    def _forget(self, account_number: str) -> None:
        with self._guard:
            self._users[account_number] -= 1
            if self._users[account_number] == 0:
                del self._users[account_number]
                del self._locks[account_number]

    def active_keys(self) -> int:
        """Chaves com alguma thread segurando ou esperando o lock."""
        with self._guard:
            return len(self._locks)
