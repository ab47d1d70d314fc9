"""
Ports (Interfaces) do Domínio de Contas.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência de usuários e contas.

Tipos de Ports:
- UserRepository: Consulta de usuários (gerenciados externamente)
- AccountRepository: Persistência de contas

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core
"""

from dataclasses import replace
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import AccountEntity, UserEntity


@runtime_checkable
class UserRepository(Protocol):
    """Interface de consulta de usuários titulares."""

    def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        ...


@runtime_checkable
class AccountRepository(Protocol):
    """
    Interface para persistência de Contas.

    Implementações:
    - DjangoAccountRepository (ORM, com select_for_update)
    - InMemoryAccountRepository (para testes)

    Note:
        ``for_update=True`` pede um lock de linha que dura até o fim
        da transação corrente do UnitOfWork.
    """

    def get_by_id(self, account_id: int) -> Optional[AccountEntity]:
        ...

    def get_by_account_number(
        self,
        account_number: str,
        for_update: bool = False,
    ) -> Optional[AccountEntity]:
        ...

    def list_by_owner(self, user_id: int) -> List[AccountEntity]:
        """Contas do usuário em ordem de criação."""
        ...

    def count_by_owner(self, user_id: int) -> int:
        """Conta todas as contas do usuário, inclusive encerradas."""
        ...

    def get_latest(self, for_update: bool = False) -> Optional[AccountEntity]:
        """Conta de maior id (a criada mais recentemente), ou None."""
        ...

    def save(self, account: AccountEntity) -> AccountEntity:
        """
        Persiste conta (create ou update).

        Returns:
            A conta salva, com id atribuído
        """
        ...


class InMemoryUserRepository:
    """
    Implementação em memória do UserRepository.

    Example:
        repo = InMemoryUserRepository()
        repo.add(UserEntity(id=1, name="Pobi"))
    """

    def __init__(self):
        self._users: Dict[int, UserEntity] = {}

    def add(self, user: UserEntity) -> UserEntity:
        self._users[user.id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        return self._users.get(user_id)


class InMemoryAccountRepository:
    """
    Implementação em memória do AccountRepository.

    Guarda cópias das entidades, de modo que alterações não salvas
    não vazam para o armazenamento (como num banco de verdade).
    Não usar em produção!
    """

    def __init__(self):
        self._accounts: Dict[int, AccountEntity] = {}
        self._next_id = 1

    def get_by_id(self, account_id: int) -> Optional[AccountEntity]:
        account = self._accounts.get(account_id)
        return replace(account) if account else None

    def get_by_account_number(
        self,
        account_number: str,
        for_update: bool = False,
    ) -> Optional[AccountEntity]:
        for account in self._accounts.values():
            if account.account_number == account_number:
                return replace(account)
        return None

    def list_by_owner(self, user_id: int) -> List[AccountEntity]:
        return [
            replace(a) for a in self._ordered()
            if a.owner_user_id == user_id
        ]

    def count_by_owner(self, user_id: int) -> int:
        return sum(1 for a in self._accounts.values() if a.owner_user_id == user_id)

    def get_latest(self, for_update: bool = False) -> Optional[AccountEntity]:
        if not self._accounts:
            return None
        return replace(self._accounts[max(self._accounts)])

    def save(self, account: AccountEntity) -> AccountEntity:
        if account.id is None:
            if self.get_by_account_number(account.account_number):
                raise ValueError(f"Número de conta duplicado: {account.account_number}")
            account.id = self._next_id
            self._next_id += 1
        else:
            self._next_id = max(self._next_id, account.id + 1)
        self._accounts[account.id] = replace(account)
        return account

    def list_all(self) -> List[AccountEntity]:
        return [replace(a) for a in self._ordered()]

    def _ordered(self) -> List[AccountEntity]:
        return [self._accounts[key] for key in sorted(self._accounts)]
