"""
Testes Unitários para Use Cases do Domínio de Contas.

Estratégia de Teste:
- Repositórios em memória (fakes) para isolamento
- FakeUnitOfWork para verificar commit/rollback e eventos

Coverage:
- CreateAccountService
- CloseAccountService
- ListAccountsService
"""

import threading
import time

import pytest

from src.core.accounts.ports import InMemoryAccountRepository
from src.core.accounts.use_cases import (
    CreateAccountService,
    CloseAccountService,
    ListAccountsService,
)
from src.core.accounts.dtos import CreateAccountInputDTO, CloseAccountInputDTO
from src.core.accounts.entities import AccountStatus
from src.core.accounts.events import AccountCreatedEvent, AccountClosedEvent
from src.core.shared.exceptions import (
    UserNotFoundError,
    AccountNotFoundError,
    AccountLimitExceededError,
    OwnerMismatchError,
    AlreadyClosedError,
    BalanceNotEmptyError,
    ValidationError,
    ConcurrencyError,
    ErrorCode,
)
from src.core.shared.interfaces import ACCOUNT_NUMBER_LOCK_KEY
from src.core.transactions.ports import InMemoryAccountLock

from tests.core.conftest import FakeUnitOfWork


@pytest.fixture
def create_service(user_repo, account_repo, uow):
    return CreateAccountService(user_repo, account_repo, uow)


@pytest.fixture
def close_service(user_repo, account_repo, uow):
    return CloseAccountService(user_repo, account_repo, uow)


# =============================================================================
# CreateAccountService
# =============================================================================

class TestCreateAccountService:
    """Testes para abertura de contas."""

    def test_primeira_conta_recebe_numero_genesis(self, create_service, account_repo, uow):
        output = create_service.execute(CreateAccountInputDTO(user_id=1, initial_balance=10000))

        assert output.account_number == "1000000000"
        assert output.user_id == 1
        assert output.balance == 10000
        assert output.status == "IN_USE"
        assert output.unregistered_at is None
        assert account_repo.get_by_account_number("1000000000") is not None
        assert uow.committed

    def test_numeracao_sequencial_entre_usuarios(self, create_service):
        first = create_service.execute(CreateAccountInputDTO(user_id=1))
        second = create_service.execute(CreateAccountInputDTO(user_id=2))
        third = create_service.execute(CreateAccountInputDTO(user_id=1))

        assert [first.account_number, second.account_number, third.account_number] == [
            "1000000000",
            "1000000001",
            "1000000002",
        ]

    def test_numero_segue_conta_mais_recente(self, create_service, account_repo, open_account):
        account = open_account()
        account.account_number = "1000000012"
        account_repo.save(account)

        output = create_service.execute(CreateAccountInputDTO(user_id=2))

        assert output.account_number == "1000000013"

    def test_evento_account_created_publicado(self, create_service, uow):
        create_service.execute(CreateAccountInputDTO(user_id=1, initial_balance=500))

        assert len(uow.published) == 1
        event = uow.published[0]
        assert isinstance(event, AccountCreatedEvent)
        assert event.aggregate_id == "1000000000"
        assert event.user_id == 1
        assert event.initial_balance == 500

    def test_usuario_inexistente(self, create_service, account_repo, uow):
        with pytest.raises(UserNotFoundError) as exc_info:
            create_service.execute(CreateAccountInputDTO(user_id=99))

        assert exc_info.value.error_code == ErrorCode.USER_NOT_FOUND
        assert account_repo.list_all() == []
        assert uow.rolled_back
        assert uow.published == []

    def test_saldo_inicial_negativo(self, create_service, account_repo):
        with pytest.raises(ValidationError):
            create_service.execute(CreateAccountInputDTO(user_id=1, initial_balance=-100))

        assert account_repo.list_all() == []

    def test_limite_de_contas_por_usuario(self, create_service, account_repo):
        for _ in range(10):
            create_service.execute(CreateAccountInputDTO(user_id=1))

        with pytest.raises(AccountLimitExceededError) as exc_info:
            create_service.execute(CreateAccountInputDTO(user_id=1))

        assert exc_info.value.limit == 10
        assert account_repo.count_by_owner(1) == 10

    def test_limite_nao_afeta_outros_usuarios(self, create_service):
        for _ in range(10):
            create_service.execute(CreateAccountInputDTO(user_id=1))

        output = create_service.execute(CreateAccountInputDTO(user_id=2))

        assert output.account_number == "1000000010"

    def test_limite_conta_contas_encerradas(self, user_repo, account_repo, uow, close_service):
        service = CreateAccountService(user_repo, account_repo, uow, max_accounts_per_user=2)
        first = service.execute(CreateAccountInputDTO(user_id=1))
        service.execute(CreateAccountInputDTO(user_id=1))
        close_service.execute(CloseAccountInputDTO(user_id=1, account_number=first.account_number))

        with pytest.raises(AccountLimitExceededError):
            service.execute(CreateAccountInputDTO(user_id=1))


class SlowAccountRepository(InMemoryAccountRepository):
    """Atrasa a leitura da conta mais recente para expor corridas."""

    def get_latest(self, for_update: bool = False):
        latest = super().get_latest(for_update)
        time.sleep(0.02)
        return latest


def run_concurrently(target, args_list):
    errors = []

    def run(*args):
        try:
            target(*args)
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=run, args=args) for args in args_list]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


class TestCreateAccountConcurrency:
    """Abertura concorrente serializada pelo lock global de numeração."""

    def test_aberturas_concorrentes_recebem_numeros_distintos(self, user_repo):
        account_repo = SlowAccountRepository()
        lock = InMemoryAccountLock(wait_timeout=5)
        numbers = []

        def create(user_id):
            service = CreateAccountService(
                user_repo, account_repo, FakeUnitOfWork(), account_lock=lock
            )
            numbers.append(service.execute(CreateAccountInputDTO(user_id=user_id)).account_number)

        errors = run_concurrently(create, [(1,), (2,)] * 4)

        assert errors == []
        assert sorted(numbers) == [f"{1000000000 + i}" for i in range(8)]
        assert lock.active_keys() == 0

    def test_limite_respeitado_sob_concorrencia(self, user_repo):
        account_repo = SlowAccountRepository()
        lock = InMemoryAccountLock(wait_timeout=5)
        seed = CreateAccountService(user_repo, account_repo, FakeUnitOfWork())
        for _ in range(9):
            seed.execute(CreateAccountInputDTO(user_id=1))

        def create():
            CreateAccountService(
                user_repo, account_repo, FakeUnitOfWork(), account_lock=lock
            ).execute(CreateAccountInputDTO(user_id=1))

        errors = run_concurrently(create, [(), ()])

        assert [type(e) for e in errors] == [AccountLimitExceededError]
        assert account_repo.count_by_owner(1) == 10

    def test_lock_de_numeracao_ocupado(self, user_repo, account_repo, uow):
        lock = InMemoryAccountLock(wait_timeout=0.05)
        service = CreateAccountService(user_repo, account_repo, uow, account_lock=lock)

        with lock.hold(ACCOUNT_NUMBER_LOCK_KEY):
            with pytest.raises(ConcurrencyError):
                service.execute(CreateAccountInputDTO(user_id=1))

        assert account_repo.list_all() == []
        assert service.execute(CreateAccountInputDTO(user_id=1)).account_number == "1000000000"


# =============================================================================
# CloseAccountService
# =============================================================================

class TestCloseAccountService:
    """Testes para encerramento de contas."""

    def test_encerrar_conta_com_saldo_zero(self, close_service, account_repo, open_account, uow):
        account = open_account(balance=0)

        output = close_service.execute(
            CloseAccountInputDTO(user_id=1, account_number=account.account_number)
        )

        assert output.status == "UNREGISTERED"
        assert output.unregistered_at is not None
        stored = account_repo.get_by_account_number(account.account_number)
        assert stored.status == AccountStatus.UNREGISTERED
        assert isinstance(uow.published[-1], AccountClosedEvent)

    def test_encerrar_conta_com_saldo(self, close_service, account_repo, open_account, uow):
        account = open_account(balance=1)

        with pytest.raises(BalanceNotEmptyError):
            close_service.execute(
                CloseAccountInputDTO(user_id=1, account_number=account.account_number)
            )

        assert account_repo.get_by_account_number(account.account_number).is_in_use
        assert uow.published == []

    def test_encerrar_conta_duas_vezes(self, close_service, open_account):
        account = open_account(balance=0)
        dto = CloseAccountInputDTO(user_id=1, account_number=account.account_number)
        close_service.execute(dto)

        with pytest.raises(AlreadyClosedError):
            close_service.execute(dto)

    def test_encerrar_conta_de_outro_usuario(self, close_service, open_account):
        account = open_account(owner_user_id=1, balance=0)

        with pytest.raises(OwnerMismatchError):
            close_service.execute(
                CloseAccountInputDTO(user_id=2, account_number=account.account_number)
            )

    def test_usuario_inexistente(self, close_service, open_account):
        account = open_account(balance=0)

        with pytest.raises(UserNotFoundError):
            close_service.execute(
                CloseAccountInputDTO(user_id=99, account_number=account.account_number)
            )

    def test_conta_inexistente(self, close_service):
        with pytest.raises(AccountNotFoundError) as exc_info:
            close_service.execute(CloseAccountInputDTO(user_id=1, account_number="1999999999"))

        assert exc_info.value.error_code == ErrorCode.ACCOUNT_NOT_FOUND


# =============================================================================
# ListAccountsService
# =============================================================================

class TestListAccountsService:
    """Testes para listagem de contas."""

    def test_lista_contas_do_usuario_em_ordem(self, user_repo, account_repo, open_account):
        open_account(owner_user_id=1, balance=100)
        open_account(owner_user_id=2, balance=200)
        open_account(owner_user_id=1, balance=300)

        accounts = ListAccountsService(user_repo, account_repo).execute(1)

        assert [a.account_number for a in accounts] == ["1000000000", "1000000002"]
        assert [a.balance for a in accounts] == [100, 300]

    def test_lista_inclui_contas_encerradas(self, user_repo, account_repo, open_account, close_service):
        account = open_account(balance=0)
        close_service.execute(CloseAccountInputDTO(user_id=1, account_number=account.account_number))

        accounts = ListAccountsService(user_repo, account_repo).execute(1)

        assert len(accounts) == 1
        assert accounts[0].status == "UNREGISTERED"

    def test_usuario_sem_contas(self, user_repo, account_repo):
        assert ListAccountsService(user_repo, account_repo).execute(2) == []

    def test_usuario_inexistente(self, user_repo, account_repo):
        with pytest.raises(UserNotFoundError):
            ListAccountsService(user_repo, account_repo).execute(99)
