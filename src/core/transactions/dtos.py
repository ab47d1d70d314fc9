"""
Data Transfer Objects (DTOs) do Domínio de Transações.

- Input DTOs: débito e cancelamento
- Output DTO: projeção de um lançamento do ledger
"""

from dataclasses import dataclass
from datetime import datetime

from .entities import TransactionEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class UseBalanceInputDTO:
    """
    DTO de entrada para débito (uso de saldo).

    Attributes:
        user_id: ID do usuário titular
        account_number: Conta a debitar
        amount: Valor do débito (> 0)
    """

    user_id: int
    account_number: str
    amount: int

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "account_number": self.account_number,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class CancelBalanceInputDTO:
    """
    DTO de entrada para cancelamento (estorno) de um débito.

    Attributes:
        transaction_id: Identificador externo da transação original
        account_number: Conta da transação original
        amount: Valor a estornar (deve ser o valor total)
    """

    transaction_id: str
    account_number: str
    amount: int

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "account_number": self.account_number,
            "amount": self.amount,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TransactionOutputDTO:
    """DTO de saída com a projeção de um lançamento."""

    account_number: str
    transaction_type: str
    transaction_result: str
    transaction_id: str
    amount: int
    balance_snapshot: int
    transacted_at: datetime

    @classmethod
    def from_entity(cls, transaction: TransactionEntity) -> "TransactionOutputDTO":
        return cls(
            account_number=transaction.account_number,
            transaction_type=transaction.transaction_type.value,
            transaction_result=transaction.result.value,
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            balance_snapshot=transaction.balance_snapshot,
            transacted_at=transaction.transacted_at,
        )

    def to_dict(self) -> dict:
        return {
            "account_number": self.account_number,
            "transaction_type": self.transaction_type,
            "transaction_result": self.transaction_result,
            "transaction_id": self.transaction_id,
            "amount": self.amount,
            "balance_snapshot": self.balance_snapshot,
            "transacted_at": self.transacted_at.isoformat() if self.transacted_at else None,
        }
