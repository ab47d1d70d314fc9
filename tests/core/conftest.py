"""
Fixtures compartilhadas pelos testes do core.

Os testes do core não tocam em Django: usam repositórios em memória
e um Unit of Work fake.
"""

from typing import List

import pytest

from src.core.accounts.entities import AccountEntity, UserEntity
from src.core.accounts.ports import InMemoryAccountRepository, InMemoryUserRepository
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import UnitOfWork
from src.core.transactions.ports import InMemoryTransactionRepository


class FakeUnitOfWork(UnitOfWork):
    """
    Fake Unit of Work para testes.

    Permite verificar:
    - Commit/rollback de cada bloco
    - Eventos publicados após commit
    """

    def __init__(self):
        super().__init__()
        self.commits = 0
        self.rollbacks = 0
        self.published: List[DomainEvent] = []

    def _begin_transaction(self):
        self.clear_events()

    def commit(self):
        self.commits += 1
        self.published.extend(self.collect_events())
        self.clear_events()

    def rollback(self):
        self.rollbacks += 1
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self.commits > 0

    @property
    def rolled_back(self) -> bool:
        return self.rollbacks > 0


@pytest.fixture
def uow():
    return FakeUnitOfWork()


@pytest.fixture
def user_repo():
    repo = InMemoryUserRepository()
    repo.add(UserEntity(id=1, name="Pobi"))
    repo.add(UserEntity(id=2, name="Woni"))
    return repo


@pytest.fixture
def account_repo():
    return InMemoryAccountRepository()


@pytest.fixture
def transaction_repo():
    return InMemoryTransactionRepository()


@pytest.fixture
def open_account(account_repo):
    """Factory que persiste uma conta IN_USE no repositório em memória."""

    def _open(owner_user_id: int = 1, balance: int = 10000) -> AccountEntity:
        latest = account_repo.get_latest()
        account = AccountEntity.open(
            owner_user_id=owner_user_id,
            account_number=AccountEntity.next_account_number(latest),
            initial_balance=balance,
        )
        return account_repo.save(account)

    return _open
