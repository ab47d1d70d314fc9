"""
Use Cases (Application Services) do Domínio de Transações.

Use Cases implementados:
- UseBalanceService: Debita saldo de uma conta
- RecordFailedUseService: Registra débito recusado (auditoria)
- CancelBalanceService: Estorna um débito
- QueryTransactionService: Consulta um lançamento

Política de auditoria:
    Apenas a recusa por saldo insuficiente gera um lançamento FAIL.
    Ele é gravado numa unidade de trabalho própria, depois do rollback
    da tentativa, para sobreviver ao rollback. Demais recusas (usuário,
    conta, titularidade, status) não deixam registro.
"""

import logging
from typing import Optional

from src.core.shared.interfaces import AccountLock, UnitOfWork, hold_lock
from src.core.shared.exceptions import (
    AccountNotFoundError,
    AlreadyClosedError,
    AmountExceedsBalanceError,
    TransactionNotFoundError,
    UserNotFoundError,
)
from src.core.accounts.ports import AccountRepository, UserRepository
from src.core.accounts.entities import AccountEntity

from .ports import TransactionRepository
from .entities import TransactionEntity
from .dtos import UseBalanceInputDTO, CancelBalanceInputDTO, TransactionOutputDTO
from .events import BalanceUsedEvent, BalanceUseFailedEvent, BalanceCanceledEvent

logger = logging.getLogger(__name__)


def _get_account_or_raise(
    account_repo: AccountRepository,
    account_number: str,
    for_update: bool = False,
) -> AccountEntity:
    account = account_repo.get_by_account_number(account_number, for_update=for_update)
    if account is None:
        raise AccountNotFoundError(account_number)
    return account


class RecordFailedUseService:
    """
    Use Case: Registrar débito recusado.

    Grava um lançamento FAIL/USE com o valor tentado e o saldo
    atual (inalterado) da conta.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        uow: UnitOfWork,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.uow = uow

    def execute(self, account_number: str, amount: int) -> None:
        """
        Raises:
            AccountNotFoundError: Conta não existe
        """
        with self.uow:
            account = _get_account_or_raise(self.account_repo, account_number)
            transaction = self.transaction_repo.save(
                TransactionEntity.failed_use(account, amount)
            )
            self.uow.publish_event(
                BalanceUseFailedEvent(
                    aggregate_id=account.account_number,
                    transaction_id=transaction.transaction_id,
                    amount=transaction.amount,
                    balance_snapshot=transaction.balance_snapshot,
                )
            )

        logger.info(
            f"Failed use of {amount} recorded for account {account_number} "
            f"as {transaction.transaction_id}"
        )


class UseBalanceService:
    """
    Use Case: Debitar saldo.

    Fluxo:
    1. Buscar usuário e conta (com lock de linha)
    2. Validar titularidade, status e saldo suficiente
    3. Debitar e persistir conta
    4. Incluir lançamento SUCCESS/USE e disparar BalanceUsed

    Se o saldo for insuficiente, a transação é desfeita, o lançamento
    FAIL é gravado via RecordFailedUseService e o erro original é
    relançado.

    Example:
        output = service.execute(UseBalanceInputDTO(
            user_id=1, account_number="1000000000", amount=200,
        ))
        print(output.balance_snapshot)  # 9800 partindo de 10000
    """

    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        uow: UnitOfWork,
        failure_recorder: RecordFailedUseService,
        account_lock: Optional[AccountLock] = None,
    ):
        self.user_repo = user_repo
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.uow = uow
        self.failure_recorder = failure_recorder
        self.account_lock = account_lock

    def execute(self, input_dto: UseBalanceInputDTO) -> TransactionOutputDTO:
        """
        Raises:
            ValidationError: Valor não positivo
            UserNotFoundError: Usuário não existe
            AccountNotFoundError: Conta não existe
            OwnerMismatchError: Conta de outro usuário
            AlreadyClosedError: Conta encerrada
            AmountExceedsBalanceError: Saldo insuficiente (lançamento FAIL gravado)
            ConcurrencyError: Lock da conta não obtido
        """
        with hold_lock(self.account_lock, input_dto.account_number):
            try:
                transaction = self._use(input_dto)
            except AmountExceedsBalanceError as exc:
                logger.warning(f"Use rejected: {exc}")
                self._record_failure(input_dto)
                raise

        logger.info(
            f"Account {transaction.account_number} used {transaction.amount} "
            f"as {transaction.transaction_id}"
        )
        return TransactionOutputDTO.from_entity(transaction)

    def _use(self, input_dto: UseBalanceInputDTO) -> TransactionEntity:
        with self.uow:
            if self.user_repo.get_by_id(input_dto.user_id) is None:
                raise UserNotFoundError(input_dto.user_id)

            account = _get_account_or_raise(
                self.account_repo, input_dto.account_number, for_update=True
            )
            account.ensure_can_use(input_dto.user_id, input_dto.amount)

            account.debit(input_dto.amount)
            account = self.account_repo.save(account)

            transaction = self.transaction_repo.save(
                TransactionEntity.successful_use(account, input_dto.amount)
            )
            self.uow.publish_event(
                BalanceUsedEvent(
                    aggregate_id=account.account_number,
                    transaction_id=transaction.transaction_id,
                    amount=transaction.amount,
                    balance_snapshot=transaction.balance_snapshot,
                )
            )
        return transaction

    def _record_failure(self, input_dto: UseBalanceInputDTO) -> None:
        try:
            self.failure_recorder.execute(input_dto.account_number, input_dto.amount)
        except Exception:
            # O erro original de saldo continua sendo o relançado
            logger.exception(
                f"Could not record failed use for account {input_dto.account_number}"
            )


class CancelBalanceService:
    """
    Use Case: Cancelar (estornar) um débito.

    Fluxo:
    1. Buscar débito original (SUCCESS/USE) e conta (com lock de linha)
    2. Validar mesma conta, valor total e janela de um ano
    3. Creditar e persistir conta
    4. Incluir lançamento SUCCESS/CANCEL e disparar BalanceCanceled

    Note:
        Não é idempotente: cancelar a mesma transação duas vezes
        credita duas vezes.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        uow: UnitOfWork,
        account_lock: Optional[AccountLock] = None,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.uow = uow
        self.account_lock = account_lock

    def execute(self, input_dto: CancelBalanceInputDTO) -> TransactionOutputDTO:
        """
        Raises:
            TransactionNotFoundError: Débito original não existe (ou não é SUCCESS/USE)
            AccountNotFoundError: Conta não existe
            TransactionAccountMismatchError: Transação de outra conta
            CancelMustBeFullError: Valor diferente do original
            TooOldToCancelError: Transação com mais de um ano
            AlreadyClosedError: Conta encerrada
            ConcurrencyError: Lock da conta não obtido
        """
        with hold_lock(self.account_lock, input_dto.account_number):
            with self.uow:
                original = self.transaction_repo.get_by_transaction_id(input_dto.transaction_id)
                # Só um débito efetivado é cancelável; FAIL e CANCEL contam como inexistentes
                if original is None or not original.is_cancelable_debit:
                    raise TransactionNotFoundError(input_dto.transaction_id)

                account = _get_account_or_raise(
                    self.account_repo, input_dto.account_number, for_update=True
                )
                original.ensure_cancelable(account, input_dto.amount)
                if not account.is_in_use:
                    raise AlreadyClosedError(account.account_number)

                account.credit(input_dto.amount)
                account = self.account_repo.save(account)

                transaction = self.transaction_repo.save(
                    TransactionEntity.successful_cancel(account, input_dto.amount)
                )
                self.uow.publish_event(
                    BalanceCanceledEvent(
                        aggregate_id=account.account_number,
                        transaction_id=transaction.transaction_id,
                        amount=transaction.amount,
                        balance_snapshot=transaction.balance_snapshot,
                        original_transaction_id=original.transaction_id,
                    )
                )

        logger.info(
            f"Transaction {original.transaction_id} canceled on account "
            f"{account.account_number} as {transaction.transaction_id}"
        )
        return TransactionOutputDTO.from_entity(transaction)


class QueryTransactionService:
    """Use Case: Consultar lançamento pelo identificador externo."""

    def __init__(self, transaction_repo: TransactionRepository):
        self.transaction_repo = transaction_repo

    def execute(self, transaction_id: str) -> TransactionOutputDTO:
        """
        Raises:
            TransactionNotFoundError: Transação não existe
        """
        transaction = self.transaction_repo.get_by_transaction_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return TransactionOutputDTO.from_entity(transaction)
