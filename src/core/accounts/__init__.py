"""
Domínio de Contas - Registro de Contas Bancárias.

Este módulo contém toda a lógica de negócio do ciclo de vida das contas:
- Entidades (UserEntity, AccountEntity, AccountStatus)
- Use Cases (CreateAccount, CloseAccount, ListAccounts)
- Domain Events (AccountCreated, AccountClosed)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios)

Características do Domínio:
- Máximo de contas por usuário (padrão 10)
- Números de conta sequenciais a partir de "1000000000"
- Conta só é encerrada com saldo zero
"""

from .entities import UserEntity, AccountEntity, AccountStatus
from .events import AccountCreatedEvent, AccountClosedEvent
from .dtos import CreateAccountInputDTO, CloseAccountInputDTO, AccountOutputDTO
from .ports import (
    UserRepository,
    AccountRepository,
    InMemoryUserRepository,
    InMemoryAccountRepository,
)
from .use_cases import (
    CreateAccountService,
    CloseAccountService,
    ListAccountsService,
)

__all__ = [
    # Entities
    "UserEntity",
    "AccountEntity",
    "AccountStatus",
    # Events
    "AccountCreatedEvent",
    "AccountClosedEvent",
    # DTOs
    "CreateAccountInputDTO",
    "CloseAccountInputDTO",
    "AccountOutputDTO",
    # Ports
    "UserRepository",
    "AccountRepository",
    "InMemoryUserRepository",
    "InMemoryAccountRepository",
    # Use Cases
    "CreateAccountService",
    "CloseAccountService",
    "ListAccountsService",
]
