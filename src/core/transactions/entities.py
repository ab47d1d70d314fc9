"""
Entidades do Domínio de Transações.

Entidades:
- TransactionEntity: Lançamento imutável no ledger
- TransactionType: USE (débito) ou CANCEL (estorno)
- TransactionResult: SUCCESS ou FAIL

Regras de Negócio Encapsuladas:
- Snapshot de saldo consistente com tipo e resultado
- Cancelamento apenas do valor total, da mesma conta
- Cancelamento apenas dentro de um ano da transação original
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from src.core.accounts.entities import AccountEntity
from src.core.shared.events import utc_now
from src.core.shared.exceptions import (
    TransactionAccountMismatchError,
    CancelMustBeFullError,
    TooOldToCancelError,
)


class TransactionType(Enum):
    USE = "USE"
    CANCEL = "CANCEL"


class TransactionResult(Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


def new_transaction_id() -> str:
    """Identificador externo opaco: UUID4 em hexadecimal (32 caracteres)."""
    return uuid.uuid4().hex


def one_year_before(moment: datetime) -> datetime:
    """Mesmo instante, um ano civil antes. 29/02 vira 28/02."""
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        return moment.replace(year=moment.year - 1, day=28)


@dataclass(frozen=True)
class TransactionEntity:
    """
    Entidade de Domínio: Transação.

    Imutável após a criação. Um cancelamento é um novo lançamento,
    nunca uma alteração do original.

    Invariantes:
    - SUCCESS/USE: balance_snapshot = saldo anterior - amount
    - SUCCESS/CANCEL: balance_snapshot = saldo anterior + amount
    - FAIL: balance_snapshot = saldo no momento da tentativa

    Attributes:
        id: Identificador atribuído pelo armazenamento
        account_id: ID da conta dona do lançamento
        account_number: Número da conta (projeção)
        transaction_id: Identificador externo (hex de 32 caracteres)
        transaction_type: USE ou CANCEL
        result: SUCCESS ou FAIL
        amount: Valor movimentado (ou tentado, se FAIL)
        balance_snapshot: Saldo da conta logo após o lançamento
        transacted_at: Momento do lançamento
    """

    id: Optional[int] = None
    account_id: Optional[int] = None
    account_number: str = ""
    transaction_id: str = field(default_factory=new_transaction_id)
    transaction_type: TransactionType = TransactionType.USE
    result: TransactionResult = TransactionResult.SUCCESS
    amount: int = 0
    balance_snapshot: int = 0
    transacted_at: datetime = field(default_factory=utc_now)

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def _for_account(
        cls,
        account: AccountEntity,
        transaction_type: TransactionType,
        result: TransactionResult,
        amount: int,
    ) -> "TransactionEntity":
        return cls(
            account_id=account.id,
            account_number=account.account_number,
            transaction_id=new_transaction_id(),
            transaction_type=transaction_type,
            result=result,
            amount=amount,
            balance_snapshot=account.balance,
            transacted_at=utc_now(),
        )

    @classmethod
    def successful_use(cls, account: AccountEntity, amount: int) -> "TransactionEntity":
        """Lançamento de débito. A conta já deve estar debitada."""
        return cls._for_account(account, TransactionType.USE, TransactionResult.SUCCESS, amount)

    @classmethod
    def failed_use(cls, account: AccountEntity, amount: int) -> "TransactionEntity":
        """Registro de auditoria de débito recusado. Saldo não alterado."""
        return cls._for_account(account, TransactionType.USE, TransactionResult.FAIL, amount)

    @classmethod
    def successful_cancel(cls, account: AccountEntity, amount: int) -> "TransactionEntity":
        """Lançamento de estorno. A conta já deve estar creditada."""
        return cls._for_account(account, TransactionType.CANCEL, TransactionResult.SUCCESS, amount)

    # =========================================================================
    # Regras de cancelamento
    # =========================================================================

    def ensure_cancelable(
        self,
        account: AccountEntity,
        amount: int,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Valida um cancelamento desta transação.

        Ordem: mesma conta, valor total, janela de um ano.

        Raises:
            TransactionAccountMismatchError: Transação de outra conta
            CancelMustBeFullError: Valor diferente do original
            TooOldToCancelError: Transação com mais de um ano
        """
        if self.account_id != account.id:
            raise TransactionAccountMismatchError(self.transaction_id, account.account_number)

        if amount != self.amount:
            raise CancelMustBeFullError(self.transaction_id, amount, self.amount)

        if self.transacted_at < one_year_before(now or utc_now()):
            raise TooOldToCancelError(self.transaction_id)

    @property
    def is_success(self) -> bool:
        return self.result == TransactionResult.SUCCESS

    @property
    def is_cancelable_debit(self) -> bool:
        """Apenas débitos efetivados (SUCCESS/USE) podem ser estornados."""
        return self.is_success and self.transaction_type == TransactionType.USE
