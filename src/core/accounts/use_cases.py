"""
Use Cases (Application Services) do Domínio de Contas.

Este módulo contém os casos de uso do registro de contas, que orquestram
a lógica de negócio coordenando entidades, repositórios e eventos.

Use Cases implementados:
- CreateAccountService: Abre nova conta para um usuário
- CloseAccountService: Encerra conta com saldo zero
- ListAccountsService: Lista contas de um usuário

Princípios:
- Um Use Case = Uma operação de negócio
- Dependências injetadas (DI)
- Sem lógica de infraestrutura
"""

import logging
from typing import List, Optional

from src.core.shared.interfaces import (
    ACCOUNT_NUMBER_LOCK_KEY,
    AccountLock,
    UnitOfWork,
    hold_lock,
)
from src.core.shared.exceptions import (
    UserNotFoundError,
    AccountNotFoundError,
    AccountLimitExceededError,
)

from .ports import UserRepository, AccountRepository
from .entities import AccountEntity, UserEntity
from .dtos import CreateAccountInputDTO, CloseAccountInputDTO, AccountOutputDTO
from .events import AccountCreatedEvent, AccountClosedEvent

logger = logging.getLogger(__name__)

DEFAULT_MAX_ACCOUNTS_PER_USER = 10


def get_user_or_raise(user_repo: UserRepository, user_id: int) -> UserEntity:
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


class CreateAccountService:
    """
    Use Case: Abrir nova conta.

    Fluxo (sob o lock global de numeração):
    1. Buscar usuário titular
    2. Verificar limite de contas por usuário
    3. Calcular próximo número a partir da conta mais recente
    4. Persistir conta IN_USE com saldo inicial
    5. Disparar evento AccountCreated

    Example:
        service = CreateAccountService(user_repo, account_repo, uow)
        output = service.execute(CreateAccountInputDTO(user_id=1, initial_balance=10000))
        print(output.account_number)  # "1000000000" na primeira conta
    """

    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: AccountRepository,
        uow: UnitOfWork,
        max_accounts_per_user: int = DEFAULT_MAX_ACCOUNTS_PER_USER,
        account_lock: Optional[AccountLock] = None,
    ):
        self.user_repo = user_repo
        self.account_repo = account_repo
        self.uow = uow
        self.max_accounts_per_user = max_accounts_per_user
        self.account_lock = account_lock

    def execute(self, input_dto: CreateAccountInputDTO) -> AccountOutputDTO:
        """
        Raises:
            UserNotFoundError: Usuário não existe
            AccountLimitExceededError: Usuário já tem o máximo de contas
            ValidationError: Saldo inicial negativo
            ConcurrencyError: Lock de numeração não obtido
        """
        with hold_lock(self.account_lock, ACCOUNT_NUMBER_LOCK_KEY):
            account = self._create(input_dto)

        logger.info(f"Account {account.account_number} created for user {account.owner_user_id}")
        return AccountOutputDTO.from_entity(account)

    def _create(self, input_dto: CreateAccountInputDTO) -> AccountEntity:
        with self.uow:
            user = get_user_or_raise(self.user_repo, input_dto.user_id)

            if self.account_repo.count_by_owner(user.id) >= self.max_accounts_per_user:
                raise AccountLimitExceededError(user.id, self.max_accounts_per_user)

            latest = self.account_repo.get_latest(for_update=True)
            account = AccountEntity.open(
                owner_user_id=user.id,
                account_number=AccountEntity.next_account_number(latest),
                initial_balance=input_dto.initial_balance,
            )
            account = self.account_repo.save(account)

            self.uow.publish_event(
                AccountCreatedEvent(
                    aggregate_id=account.account_number,
                    user_id=user.id,
                    initial_balance=account.balance,
                )
            )
        return account


class CloseAccountService:
    """
    Use Case: Encerrar conta.

    Fluxo:
    1. Buscar usuário e conta (com lock de linha)
    2. Encerrar na entidade (titularidade, status, saldo zero)
    3. Persistir e disparar evento AccountClosed
    """

    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: AccountRepository,
        uow: UnitOfWork,
    ):
        self.user_repo = user_repo
        self.account_repo = account_repo
        self.uow = uow

    def execute(self, input_dto: CloseAccountInputDTO) -> AccountOutputDTO:
        """
        Raises:
            UserNotFoundError: Usuário não existe
            AccountNotFoundError: Conta não existe
            OwnerMismatchError: Conta de outro usuário
            AlreadyClosedError: Conta já encerrada
            BalanceNotEmptyError: Conta ainda tem saldo
        """
        with self.uow:
            user = get_user_or_raise(self.user_repo, input_dto.user_id)

            account = self.account_repo.get_by_account_number(
                input_dto.account_number, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(input_dto.account_number)

            account.close(user.id)
            account = self.account_repo.save(account)

            self.uow.publish_event(
                AccountClosedEvent(
                    aggregate_id=account.account_number,
                    user_id=user.id,
                )
            )

        logger.info(f"Account {account.account_number} closed by user {user.id}")
        return AccountOutputDTO.from_entity(account)


class ListAccountsService:
    """Use Case: Listar contas de um usuário (somente leitura)."""

    def __init__(self, user_repo: UserRepository, account_repo: AccountRepository):
        self.user_repo = user_repo
        self.account_repo = account_repo

    def execute(self, user_id: int) -> List[AccountOutputDTO]:
        """
        Raises:
            UserNotFoundError: Usuário não existe
        """
        user = get_user_or_raise(self.user_repo, user_id)
        return [
            AccountOutputDTO.from_entity(account)
            for account in self.account_repo.list_by_owner(user.id)
        ]
