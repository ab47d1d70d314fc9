"""
Domain Events do Domínio de Transações.

Eventos:
- BalanceUsedEvent: Débito efetuado
- BalanceUseFailedEvent: Débito recusado por saldo insuficiente
- BalanceCanceledEvent: Débito estornado

Todos usam o número da conta como aggregate_id, de modo que o
Event Store guarda a história completa de cada conta.
"""

from dataclasses import dataclass
from typing import Any, Dict

from src.core.shared.events import DomainEvent


@dataclass
class _LedgerEvent(DomainEvent):
    transaction_id: str = ""
    amount: int = 0
    balance_snapshot: int = 0

    @property
    def aggregate_type(self) -> str:
        return "Account"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "amount": self.amount,
            "balance_snapshot": self.balance_snapshot,
        }


@dataclass
class BalanceUsedEvent(_LedgerEvent):
    """
    Evento: Saldo foi debitado.

    Handlers típicos:
    - Registrar trilha de auditoria
    - Atualizar métricas de volume
    """


@dataclass
class BalanceUseFailedEvent(_LedgerEvent):
    """Evento: Débito recusado; balance_snapshot é o saldo inalterado."""


@dataclass
class BalanceCanceledEvent(_LedgerEvent):
    """Evento: Débito estornado (novo lançamento CANCEL)."""

    original_transaction_id: str = ""

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data["original_transaction_id"] = self.original_transaction_id
        return data
