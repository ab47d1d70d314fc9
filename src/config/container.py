"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, lock, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: Regras do ledger vindas das settings

Adapters Django são importados sob demanda, para que o container
possa ser montado antes de django.setup().
"""

from importlib import import_module
from typing import Callable, Optional

from dependency_injector import containers, providers

from src.core.accounts.use_cases import (
    CloseAccountService,
    CreateAccountService,
    ListAccountsService,
    DEFAULT_MAX_ACCOUNTS_PER_USER,
)
from src.core.accounts.ports import InMemoryAccountRepository, InMemoryUserRepository
from src.core.transactions.use_cases import (
    CancelBalanceService,
    QueryTransactionService,
    RecordFailedUseService,
    UseBalanceService,
)
from src.core.transactions.ports import InMemoryAccountLock, InMemoryTransactionRepository


def _lazy(module: str, name: str) -> Callable:
    """Factory que só importa o adapter quando é chamada."""

    def build(*args, **kwargs):
        return getattr(import_module(module), name)(*args, **kwargs)

    build.__name__ = name
    return build


_REPOSITORIES = 'src.adapters.django_app.ledger.repositories'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Example:
        container = get_container()
        service = container.use_balance_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration(default={
        'max_accounts_per_user': DEFAULT_MAX_ACCOUNTS_PER_USER,
        'lock_timeout': 5.0,
        'lock_wait': 3.0,
        'event_publisher_mode': 'sync',
    })

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    event_store = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoEventStore'))

    account_lock = providers.Singleton(
        _lazy('src.adapters.django_app.shared.locks', 'CacheAccountLock'),
        timeout=config.lock_timeout,
        wait_timeout=config.lock_wait,
    )

    # =========================================================================
    # Repositories
    # =========================================================================

    user_repository = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoUserRepository'))
    account_repository = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoAccountRepository'))
    transaction_repository = providers.Singleton(
        _lazy(_REPOSITORIES, 'DjangoTransactionRepository')
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Services / Use Cases - Contas
    # =========================================================================

    create_account_service = providers.Factory(
        CreateAccountService,
        user_repo=user_repository,
        account_repo=account_repository,
        uow=unit_of_work,
        max_accounts_per_user=config.max_accounts_per_user,
        account_lock=account_lock,
    )

    close_account_service = providers.Factory(
        CloseAccountService,
        user_repo=user_repository,
        account_repo=account_repository,
        uow=unit_of_work,
    )

    list_accounts_service = providers.Factory(
        ListAccountsService,
        user_repo=user_repository,
        account_repo=account_repository,
    )

    # =========================================================================
    # Services / Use Cases - Transações
    # =========================================================================

    record_failed_use_service = providers.Factory(
        RecordFailedUseService,
        account_repo=account_repository,
        transaction_repo=transaction_repository,
        uow=unit_of_work,
    )

    use_balance_service = providers.Factory(
        UseBalanceService,
        user_repo=user_repository,
        account_repo=account_repository,
        transaction_repo=transaction_repository,
        uow=unit_of_work,
        failure_recorder=record_failed_use_service,
        account_lock=account_lock,
    )

    cancel_balance_service = providers.Factory(
        CancelBalanceService,
        account_repo=account_repository,
        transaction_repo=transaction_repository,
        uow=unit_of_work,
        account_lock=account_lock,
    )

    query_transaction_service = providers.Factory(
        QueryTransactionService,
        transaction_repo=transaction_repository,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir, carregando as regras do ledger das settings.
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict({
            'max_accounts_per_user': getattr(
                settings, 'LEDGER_MAX_ACCOUNTS_PER_USER', DEFAULT_MAX_ACCOUNTS_PER_USER
            ),
            'lock_timeout': getattr(settings, 'LEDGER_ACCOUNT_LOCK_TIMEOUT', 5.0),
            'lock_wait': getattr(settings, 'LEDGER_ACCOUNT_LOCK_WAIT', 3.0),
            'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
        })

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Infraestrutura em memória para testes rápidos.

    Sobrescreve os providers de mesmo nome do Container.

    Example:
        container = get_testing_container()
        container.user_repository().add(UserEntity(id=1, name="Pobi"))
        container.create_account_service().execute(...)
    """

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'InMemoryEventPublisher')
    )

    account_lock = providers.Singleton(InMemoryAccountLock, wait_timeout=1.0)

    user_repository = providers.Singleton(InMemoryUserRepository)
    account_repository = providers.Singleton(InMemoryAccountRepository)
    transaction_repository = providers.Singleton(InMemoryTransactionRepository)

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'InMemoryUnitOfWork'),
        event_publisher=event_publisher,
    )


def get_testing_container() -> Container:
    """Container com todos os adapters trocados por versões em memória."""
    container = Container()
    container.override(TestingContainer())
    return container
