"""
Testes Unitários para Use Cases do Domínio de Transações.

Estratégia de Teste:
- Repositórios em memória e FakeUnitOfWork
- Falha de auditoria simulada com Mock

Coverage:
- UseBalanceService (inclusive registro FAIL)
- RecordFailedUseService
- CancelBalanceService
- QueryTransactionService
- InMemoryAccountLock (descarte de chaves)
"""

import logging
import threading
from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.core.accounts.entities import AccountStatus
from src.core.shared.events import utc_now
from src.core.shared.exceptions import (
    UserNotFoundError,
    AccountNotFoundError,
    TransactionNotFoundError,
    OwnerMismatchError,
    AlreadyClosedError,
    AmountExceedsBalanceError,
    TransactionAccountMismatchError,
    CancelMustBeFullError,
    TooOldToCancelError,
    ConcurrencyError,
    ValidationError,
)
from src.core.transactions.dtos import UseBalanceInputDTO, CancelBalanceInputDTO
from src.core.transactions.entities import (
    TransactionEntity,
    TransactionResult,
    TransactionType,
)
from src.core.transactions.events import (
    BalanceUsedEvent,
    BalanceUseFailedEvent,
    BalanceCanceledEvent,
)
from src.core.transactions.ports import InMemoryAccountLock
from src.core.transactions.use_cases import (
    UseBalanceService,
    RecordFailedUseService,
    CancelBalanceService,
    QueryTransactionService,
)

from tests.core.conftest import FakeUnitOfWork


@pytest.fixture
def failure_uow():
    return FakeUnitOfWork()


@pytest.fixture
def account_lock():
    return InMemoryAccountLock(wait_timeout=0.05)


@pytest.fixture
def use_service(user_repo, account_repo, transaction_repo, uow, failure_uow, account_lock):
    return UseBalanceService(
        user_repo=user_repo,
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        uow=uow,
        failure_recorder=RecordFailedUseService(account_repo, transaction_repo, failure_uow),
        account_lock=account_lock,
    )


@pytest.fixture
def cancel_service(account_repo, transaction_repo, uow, account_lock):
    return CancelBalanceService(account_repo, transaction_repo, uow, account_lock=account_lock)


@pytest.fixture
def account(open_account):
    return open_account(owner_user_id=1, balance=10000)


# =============================================================================
# UseBalanceService
# =============================================================================

class TestUseBalanceService:
    """Testes para débito de saldo."""

    def test_debito_com_sucesso(self, use_service, account, account_repo, transaction_repo, uow):
        output = use_service.execute(
            UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=200)
        )

        assert output.account_number == "1000000000"
        assert output.transaction_type == "USE"
        assert output.transaction_result == "SUCCESS"
        assert output.amount == 200
        assert output.balance_snapshot == 9800
        assert account_repo.get_by_account_number("1000000000").balance == 9800

        stored = transaction_repo.get_by_transaction_id(output.transaction_id)
        assert stored.result == TransactionResult.SUCCESS
        assert stored.account_id == account.id

        assert len(uow.published) == 1
        assert isinstance(uow.published[0], BalanceUsedEvent)
        assert uow.published[0].balance_snapshot == 9800

    def test_debitos_sucessivos(self, use_service, account, account_repo):
        for amount in (1000, 2000, 3000):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=amount)
            )

        assert account_repo.get_by_account_number(account.account_number).balance == 4000

    def test_debito_de_todo_o_saldo(self, use_service, account):
        output = use_service.execute(
            UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=10000)
        )

        assert output.balance_snapshot == 0

    def test_saldo_insuficiente_registra_falha(
        self, use_service, account, account_repo, transaction_repo, uow, failure_uow
    ):
        with pytest.raises(AmountExceedsBalanceError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=10001)
            )

        assert account_repo.get_by_account_number(account.account_number).balance == 10000
        assert uow.rolled_back
        assert uow.published == []

        records = transaction_repo.list_by_account(account.account_number)
        assert len(records) == 1
        failed = records[0]
        assert failed.result == TransactionResult.FAIL
        assert failed.transaction_type == TransactionType.USE
        assert failed.amount == 10001
        assert failed.balance_snapshot == 10000

        assert failure_uow.committed
        assert isinstance(failure_uow.published[0], BalanceUseFailedEvent)

    def test_falha_na_auditoria_preserva_erro_original(
        self, user_repo, account_repo, transaction_repo, uow, account, caplog
    ):
        recorder = Mock()
        recorder.execute.side_effect = RuntimeError("audit store down")
        service = UseBalanceService(
            user_repo, account_repo, transaction_repo, uow, failure_recorder=recorder
        )

        with caplog.at_level(logging.ERROR):
            with pytest.raises(AmountExceedsBalanceError):
                service.execute(
                    UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=99999)
                )

        recorder.execute.assert_called_once_with(account.account_number, 99999)
        assert "Could not record failed use" in caplog.text
        assert transaction_repo.list_all() == []

    def test_usuario_inexistente_nao_registra(self, use_service, account, transaction_repo):
        with pytest.raises(UserNotFoundError):
            use_service.execute(
                UseBalanceInputDTO(user_id=99, account_number=account.account_number, amount=100)
            )

        assert transaction_repo.list_all() == []

    def test_conta_inexistente(self, use_service, transaction_repo):
        with pytest.raises(AccountNotFoundError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number="1999999999", amount=100)
            )

        assert transaction_repo.list_all() == []

    def test_conta_de_outro_usuario(self, use_service, account, account_repo, transaction_repo):
        with pytest.raises(OwnerMismatchError):
            use_service.execute(
                UseBalanceInputDTO(user_id=2, account_number=account.account_number, amount=100)
            )

        assert account_repo.get_by_account_number(account.account_number).balance == 10000
        assert transaction_repo.list_all() == []

    def test_conta_encerrada(self, use_service, account_repo, open_account, transaction_repo):
        closed = open_account(balance=0)
        closed.close(user_id=1)
        account_repo.save(closed)

        with pytest.raises(AlreadyClosedError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=closed.account_number, amount=100)
            )

        assert transaction_repo.list_all() == []

    def test_valor_nao_positivo(self, use_service, account):
        with pytest.raises(ValidationError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=0)
            )

    def test_conta_bloqueada_por_outra_transacao(self, use_service, account, account_lock, account_repo):
        with account_lock.hold(account.account_number):
            with pytest.raises(ConcurrencyError):
                use_service.execute(
                    UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=100)
                )

        assert account_repo.get_by_account_number(account.account_number).balance == 10000

    def test_lock_liberado_apos_erro(self, use_service, account):
        with pytest.raises(AmountExceedsBalanceError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=50000)
            )

        output = use_service.execute(
            UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=100)
        )
        assert output.balance_snapshot == 9900

    def test_debitos_concorrentes_nao_perdem_atualizacao(
        self, user_repo, account_repo, transaction_repo, account
    ):
        lock = InMemoryAccountLock(wait_timeout=5)

        def use():
            service = UseBalanceService(
                user_repo,
                account_repo,
                transaction_repo,
                FakeUnitOfWork(),
                failure_recorder=RecordFailedUseService(
                    account_repo, transaction_repo, FakeUnitOfWork()
                ),
                account_lock=lock,
            )
            service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=100)
            )

        threads = [threading.Thread(target=use) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert account_repo.get_by_account_number(account.account_number).balance == 8000
        assert len(transaction_repo.list_all()) == 20
        assert lock.active_keys() == 0


# =============================================================================
# RecordFailedUseService
# =============================================================================

class TestRecordFailedUseService:

    def test_registra_lancamento_fail(self, account_repo, transaction_repo, account, uow):
        RecordFailedUseService(account_repo, transaction_repo, uow).execute(
            account.account_number, 20000
        )

        [record] = transaction_repo.list_all()
        assert record.result == TransactionResult.FAIL
        assert record.balance_snapshot == 10000
        assert uow.committed

    def test_conta_inexistente(self, account_repo, transaction_repo, uow):
        with pytest.raises(AccountNotFoundError):
            RecordFailedUseService(account_repo, transaction_repo, uow).execute("1999999999", 10)


# =============================================================================
# CancelBalanceService
# =============================================================================

@pytest.fixture
def used(use_service, account):
    """Débito de 200 na conta de 10000."""
    return use_service.execute(
        UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=200)
    )


class TestCancelBalanceService:
    """Testes para cancelamento (estorno) de débitos."""

    def test_cancelamento_com_sucesso(self, cancel_service, used, account_repo, transaction_repo, uow):
        output = cancel_service.execute(
            CancelBalanceInputDTO(
                transaction_id=used.transaction_id,
                account_number=used.account_number,
                amount=200,
            )
        )

        assert output.transaction_type == "CANCEL"
        assert output.transaction_result == "SUCCESS"
        assert output.amount == 200
        assert output.balance_snapshot == 10000
        assert output.transaction_id != used.transaction_id
        assert account_repo.get_by_account_number(used.account_number).balance == 10000

        original = transaction_repo.get_by_transaction_id(used.transaction_id)
        assert original.transaction_type == TransactionType.USE
        assert original.result == TransactionResult.SUCCESS

        event = uow.published[-1]
        assert isinstance(event, BalanceCanceledEvent)
        assert event.original_transaction_id == used.transaction_id

    def test_cancelamento_repetido_credita_novamente(self, cancel_service, used, account_repo):
        dto = CancelBalanceInputDTO(
            transaction_id=used.transaction_id,
            account_number=used.account_number,
            amount=200,
        )
        cancel_service.execute(dto)
        output = cancel_service.execute(dto)

        assert output.balance_snapshot == 10200
        assert account_repo.get_by_account_number(used.account_number).balance == 10200

    def test_transacao_inexistente(self, cancel_service, account):
        with pytest.raises(TransactionNotFoundError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id="0" * 32,
                    account_number=account.account_number,
                    amount=200,
                )
            )

    def test_lancamento_fail_nao_e_cancelavel(
        self, use_service, cancel_service, open_account, account_repo, transaction_repo
    ):
        small = open_account(owner_user_id=1, balance=100)
        with pytest.raises(AmountExceedsBalanceError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=small.account_number, amount=5000)
            )
        [failed] = transaction_repo.list_by_account(small.account_number)

        with pytest.raises(TransactionNotFoundError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=failed.transaction_id,
                    account_number=small.account_number,
                    amount=5000,
                )
            )

        assert account_repo.get_by_account_number(small.account_number).balance == 100
        assert len(transaction_repo.list_by_account(small.account_number)) == 1

    def test_lancamento_cancel_nao_e_cancelavel(self, cancel_service, used, account_repo):
        cancel = cancel_service.execute(
            CancelBalanceInputDTO(
                transaction_id=used.transaction_id,
                account_number=used.account_number,
                amount=200,
            )
        )

        with pytest.raises(TransactionNotFoundError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=cancel.transaction_id,
                    account_number=used.account_number,
                    amount=200,
                )
            )

        assert account_repo.get_by_account_number(used.account_number).balance == 10000

    def test_transacao_verificada_antes_da_conta(self, cancel_service):
        with pytest.raises(TransactionNotFoundError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id="0" * 32,
                    account_number="1999999999",
                    amount=200,
                )
            )

    def test_conta_inexistente(self, cancel_service, used):
        with pytest.raises(AccountNotFoundError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=used.transaction_id,
                    account_number="1999999999",
                    amount=200,
                )
            )

    def test_conta_diferente_da_transacao(self, cancel_service, used, open_account, account_repo):
        other = open_account(owner_user_id=1, balance=500)

        with pytest.raises(TransactionAccountMismatchError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=used.transaction_id,
                    account_number=other.account_number,
                    amount=200,
                )
            )

        assert account_repo.get_by_account_number(other.account_number).balance == 500

    def test_cancelamento_parcial(self, cancel_service, used, account_repo):
        with pytest.raises(CancelMustBeFullError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=used.transaction_id,
                    account_number=used.account_number,
                    amount=100,
                )
            )

        assert account_repo.get_by_account_number(used.account_number).balance == 9800

    def test_transacao_com_mais_de_um_ano(self, cancel_service, account, transaction_repo, account_repo):
        old = transaction_repo.save(
            TransactionEntity(
                account_id=account.id,
                account_number=account.account_number,
                amount=200,
                balance_snapshot=10000,
                transacted_at=utc_now() - timedelta(days=730),
            )
        )

        with pytest.raises(TooOldToCancelError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=old.transaction_id,
                    account_number=account.account_number,
                    amount=200,
                )
            )

        assert account_repo.get_by_account_number(account.account_number).balance == 10000

    def test_conta_encerrada(self, use_service, cancel_service, account, account_repo):
        used_all = use_service.execute(
            UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=10000)
        )
        closed = account_repo.get_by_account_number(account.account_number)
        closed.close(user_id=1)
        account_repo.save(closed)

        with pytest.raises(AlreadyClosedError):
            cancel_service.execute(
                CancelBalanceInputDTO(
                    transaction_id=used_all.transaction_id,
                    account_number=account.account_number,
                    amount=10000,
                )
            )

        stored = account_repo.get_by_account_number(account.account_number)
        assert stored.balance == 0
        assert stored.status == AccountStatus.UNREGISTERED

    def test_conta_bloqueada(self, cancel_service, used, account_lock):
        with account_lock.hold(used.account_number):
            with pytest.raises(ConcurrencyError):
                cancel_service.execute(
                    CancelBalanceInputDTO(
                        transaction_id=used.transaction_id,
                        account_number=used.account_number,
                        amount=200,
                    )
                )


# =============================================================================
# QueryTransactionService
# =============================================================================

class TestQueryTransactionService:

    def test_consulta_transacao(self, transaction_repo, used):
        output = QueryTransactionService(transaction_repo).execute(used.transaction_id)

        assert output == used

    def test_consulta_transacao_fail(self, use_service, transaction_repo, account):
        with pytest.raises(AmountExceedsBalanceError):
            use_service.execute(
                UseBalanceInputDTO(user_id=1, account_number=account.account_number, amount=20000)
            )
        [failed] = transaction_repo.list_all()

        output = QueryTransactionService(transaction_repo).execute(failed.transaction_id)

        assert output.transaction_result == "FAIL"
        assert output.balance_snapshot == 10000

    def test_transacao_inexistente(self, transaction_repo):
        with pytest.raises(TransactionNotFoundError):
            QueryTransactionService(transaction_repo).execute("nao-existe")


# =============================================================================
# InMemoryAccountLock
# =============================================================================

class TestInMemoryAccountLock:

    def test_chaves_descartadas_apos_uso(self):
        lock = InMemoryAccountLock(wait_timeout=0.05)

        with lock.hold("1000000000"):
            with lock.hold("1000000001"):
                assert lock.active_keys() == 2

        assert lock.active_keys() == 0

    def test_chave_descartada_apos_espera_esgotada(self):
        lock = InMemoryAccountLock(wait_timeout=0.05)

        with lock.hold("1000000000"):
            with pytest.raises(ConcurrencyError):
                with lock.hold("1000000000"):
                    pass
            assert lock.active_keys() == 1

        assert lock.active_keys() == 0

    def test_chave_reutilizada_apos_descarte(self):
        lock = InMemoryAccountLock(wait_timeout=0.05)

        for _ in range(3):
            with lock.hold("1000000000"):
                assert lock.active_keys() == 1

        assert lock.active_keys() == 0
