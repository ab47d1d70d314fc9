"""
Domain Events do Domínio de Contas.

Eventos:
- AccountCreatedEvent: Nova conta aberta
- AccountClosedEvent: Conta encerrada

Uso:
    with uow:
        account_repo.save(account)
        uow.publish_event(AccountCreatedEvent(aggregate_id=account.account_number, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict

from src.core.shared.events import DomainEvent


@dataclass
class AccountCreatedEvent(DomainEvent):
    """
    Evento: Conta foi aberta.

    Handlers típicos:
    - Registrar trilha de auditoria
    - Atualizar métricas de contas abertas
    """

    user_id: int = 0
    initial_balance: int = 0

    @property
    def aggregate_type(self) -> str:
        return "Account"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "initial_balance": self.initial_balance,
        }


@dataclass
class AccountClosedEvent(DomainEvent):
    """Evento: Conta foi encerrada (IN_USE → UNREGISTERED)."""

    user_id: int = 0

    @property
    def aggregate_type(self) -> str:
        return "Account"

    def _get_event_data(self) -> Dict[str, Any]:
        return {"user_id": self.user_id}
