"""
Data Transfer Objects (DTOs) do Domínio de Contas.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento das entidades para as camadas externas.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada validados (de Forms/APIs)
- Output DTOs: Formatam dados para resposta (para APIs)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .entities import AccountEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CreateAccountInputDTO:
    """
    DTO de entrada para abrir conta.

    Attributes:
        user_id: ID do usuário titular
        initial_balance: Saldo inicial (>= 0)
    """

    user_id: int
    initial_balance: int = 0

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "initial_balance": self.initial_balance,
        }


@dataclass(frozen=True)
class CloseAccountInputDTO:
    """
    DTO de entrada para encerrar conta.

    Attributes:
        user_id: ID do usuário que solicita o encerramento
        account_number: Número da conta a encerrar
    """

    user_id: int
    account_number: str

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "account_number": self.account_number,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class AccountOutputDTO:
    """
    DTO de saída com a projeção de uma conta.

    Usado como retorno de todos os use cases do registro de contas.
    """

    user_id: int
    account_number: str
    balance: int
    status: str
    registered_at: datetime
    unregistered_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, account: AccountEntity) -> "AccountOutputDTO":
        return cls(
            user_id=account.owner_user_id,
            account_number=account.account_number,
            balance=account.balance,
            status=account.status.value,
            registered_at=account.registered_at,
            unregistered_at=account.unregistered_at,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário serializável em JSON."""
        return {
            "user_id": self.user_id,
            "account_number": self.account_number,
            "balance": self.balance,
            "status": self.status,
            "registered_at": self.registered_at.isoformat() if self.registered_at else None,
            "unregistered_at": self.unregistered_at.isoformat() if self.unregistered_at else None,
        }
