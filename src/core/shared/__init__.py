"""
Shared Domain Components.

Contém componentes compartilhados entre os domínios de contas e transações:
- Exceções de domínio e o conjunto fechado de ErrorCode
- Interfaces (Ports)
- Base class para Domain Events
"""

from .exceptions import (
    ErrorCode,
    DomainException,
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    ConcurrencyError,
)
from .events import DomainEvent, utc_now
from .interfaces import UnitOfWork, EventPublisher, EventStore, AccountLock

__all__ = [
    "ErrorCode",
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "ConcurrencyError",
    "DomainEvent",
    "utc_now",
    "UnitOfWork",
    "EventPublisher",
    "EventStore",
    "AccountLock",
]
