"""
Domínio de Transações - Ledger de Movimentações.

Este módulo contém a lógica de negócio dos lançamentos sobre o saldo:
- Entidades (TransactionEntity, TransactionType, TransactionResult)
- Use Cases (UseBalance, RecordFailedUse, CancelBalance, QueryTransaction)
- Domain Events (BalanceUsed, BalanceUseFailed, BalanceCanceled)
- Ports (TransactionRepository, InMemoryAccountLock)

Características do Domínio:
- Lançamentos imutáveis, com snapshot do saldo
- Débito recusado por saldo gera lançamento FAIL de auditoria
- Estorno apenas total e dentro de um ano
"""

from .entities import TransactionEntity, TransactionType, TransactionResult
from .events import BalanceUsedEvent, BalanceUseFailedEvent, BalanceCanceledEvent
from .dtos import UseBalanceInputDTO, CancelBalanceInputDTO, TransactionOutputDTO
from .ports import (
    TransactionRepository,
    InMemoryTransactionRepository,
    InMemoryAccountLock,
)
from .use_cases import (
    UseBalanceService,
    RecordFailedUseService,
    CancelBalanceService,
    QueryTransactionService,
)

__all__ = [
    # Entities
    "TransactionEntity",
    "TransactionType",
    "TransactionResult",
    # Events
    "BalanceUsedEvent",
    "BalanceUseFailedEvent",
    "BalanceCanceledEvent",
    # DTOs
    "UseBalanceInputDTO",
    "CancelBalanceInputDTO",
    "TransactionOutputDTO",
    # Ports
    "TransactionRepository",
    "InMemoryTransactionRepository",
    "InMemoryAccountLock",
    # Use Cases
    "UseBalanceService",
    "RecordFailedUseService",
    "CancelBalanceService",
    "QueryTransactionService",
]
