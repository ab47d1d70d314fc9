"""
Exceções de Domínio do Account Ledger.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    ├── EntityNotFoundError (entidade não existe)
    │   ├── UserNotFoundError
    │   ├── AccountNotFoundError
    │   └── TransactionNotFoundError
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   ├── OwnerMismatchError
    │   ├── AccountLimitExceededError
    │   ├── AlreadyClosedError
    │   ├── BalanceNotEmptyError
    │   ├── AmountExceedsBalanceError
    │   ├── TransactionAccountMismatchError
    │   ├── CancelMustBeFullError
    │   └── TooOldToCancelError
    └── ConcurrencyError (conflito de acesso concorrente)

Os tipos de erro de negócio formam um conjunto fechado, exposto em
``ErrorCode``. Toda exceção concreta carrega seu ``error_code``.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Conjunto fechado de erros de negócio do ledger."""

    USER_NOT_FOUND = "UserNotFound"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    TRANSACTION_NOT_FOUND = "TransactionNotFound"
    OWNER_MISMATCH = "OwnerMismatch"
    ACCOUNT_LIMIT_EXCEEDED = "AccountLimitExceeded"
    ALREADY_CLOSED = "AlreadyClosed"
    BALANCE_NOT_EMPTY = "BalanceNotEmpty"
    AMOUNT_EXCEEDS_BALANCE = "AmountExceedsBalance"
    TRANSACTION_ACCOUNT_MISMATCH = "TransactionAccountMismatch"
    CANCEL_MUST_BE_FULL = "CancelMustBeFull"
    TOO_OLD_TO_CANCEL = "TooOldToCancel"


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            account.close(user_id)
        except DomainException as e:
            logger.error(f"Domain error: {e}")
    """

    error_code: Optional[ErrorCode] = None

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        result = {
            "error": self.code,
            "message": self.message,
        }
        if self.error_code is not None:
            result["error_code"] = self.error_code.value
        return result


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento (ex: valor de débito não positivo).
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por chave não retorna resultado.
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class ConcurrencyError(DomainException):
    """
    Erro de concorrência.

    Lançada quando o lock de uma conta não pode ser obtido dentro
    do tempo de espera configurado. Não faz parte do conjunto fechado
    de erros de negócio.
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


# =============================================================================
# NÃO ENCONTRADOS
# =============================================================================


class UserNotFoundError(EntityNotFoundError):
    error_code = ErrorCode.USER_NOT_FOUND

    def __init__(self, user_id):
        super().__init__(
            f"Usuário {user_id} não encontrado",
            entity_type="User",
            entity_id=str(user_id),
        )


class AccountNotFoundError(EntityNotFoundError):
    error_code = ErrorCode.ACCOUNT_NOT_FOUND

    def __init__(self, account_number: str):
        super().__init__(
            f"Conta {account_number} não encontrada",
            entity_type="Account",
            entity_id=str(account_number),
        )


class TransactionNotFoundError(EntityNotFoundError):
    error_code = ErrorCode.TRANSACTION_NOT_FOUND

    def __init__(self, transaction_id: str):
        super().__init__(
            f"Transação {transaction_id} não encontrada",
            entity_type="Transaction",
            entity_id=str(transaction_id),
        )


# =============================================================================
# REGRAS DE NEGÓCIO
# =============================================================================


class OwnerMismatchError(BusinessRuleViolationError):
    """Conta pertence a outro usuário."""

    error_code = ErrorCode.OWNER_MISMATCH

    def __init__(self, user_id, account_number: str):
        super().__init__(
            f"Conta {account_number} não pertence ao usuário {user_id}",
            rule="account_owner",
        )


class AccountLimitExceededError(BusinessRuleViolationError):
    """Usuário já possui o número máximo de contas."""

    error_code = ErrorCode.ACCOUNT_LIMIT_EXCEEDED

    def __init__(self, user_id, limit: int):
        self.limit = limit
        super().__init__(
            f"Usuário {user_id} já possui o máximo de {limit} contas",
            rule="max_accounts_per_user",
        )


class AlreadyClosedError(BusinessRuleViolationError):
    """Conta já foi encerrada (UNREGISTERED)."""

    error_code = ErrorCode.ALREADY_CLOSED

    def __init__(self, account_number: str):
        super().__init__(
            f"Conta {account_number} já está encerrada",
            rule="account_in_use",
        )


class BalanceNotEmptyError(BusinessRuleViolationError):
    """Conta com saldo não pode ser encerrada."""

    error_code = ErrorCode.BALANCE_NOT_EMPTY

    def __init__(self, account_number: str, balance: int):
        self.balance = balance
        super().__init__(
            f"Conta {account_number} ainda possui saldo ({balance})",
            rule="zero_balance_on_close",
        )


class AmountExceedsBalanceError(BusinessRuleViolationError):
    """Valor do débito maior que o saldo disponível."""

    error_code = ErrorCode.AMOUNT_EXCEEDS_BALANCE

    def __init__(self, account_number: str, amount: int, balance: int):
        self.amount = amount
        self.balance = balance
        super().__init__(
            f"Valor {amount} excede o saldo {balance} da conta {account_number}",
            rule="amount_within_balance",
        )


class TransactionAccountMismatchError(BusinessRuleViolationError):
    """Transação original não pertence à conta informada."""

    error_code = ErrorCode.TRANSACTION_ACCOUNT_MISMATCH

    def __init__(self, transaction_id: str, account_number: str):
        super().__init__(
            f"Transação {transaction_id} não pertence à conta {account_number}",
            rule="transaction_account",
        )


class CancelMustBeFullError(BusinessRuleViolationError):
    """Cancelamento parcial não é permitido."""

    error_code = ErrorCode.CANCEL_MUST_BE_FULL

    def __init__(self, transaction_id: str, amount: int, original_amount: int):
        self.amount = amount
        self.original_amount = original_amount
        super().__init__(
            f"Cancelamento de {transaction_id} deve ser do valor total "
            f"({original_amount}), recebido {amount}",
            rule="full_cancel_only",
        )


class TooOldToCancelError(BusinessRuleViolationError):
    """Transação com mais de um ano não pode ser cancelada."""

    error_code = ErrorCode.TOO_OLD_TO_CANCEL

    def __init__(self, transaction_id: str):
        super().__init__(
            f"Transação {transaction_id} tem mais de um ano e não pode ser cancelada",
            rule="cancel_window",
        )
