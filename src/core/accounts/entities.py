"""
Entidades do Domínio de Contas.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a contas bancárias.

Entidades:
- UserEntity: Titular de contas (gerenciado externamente)
- AccountEntity: Agregado principal do domínio
- AccountStatus: Estados possíveis de uma conta

Regras de Negócio Encapsuladas:
- Saldo nunca fica negativo
- Numeração sequencial a partir de "1000000000"
- Encerramento só com saldo zero e apenas uma vez
- Conta encerrada não movimenta saldo
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from src.core.shared.events import utc_now
from src.core.shared.exceptions import (
    ValidationError,
    OwnerMismatchError,
    AlreadyClosedError,
    BalanceNotEmptyError,
    AmountExceedsBalanceError,
)


class AccountStatus(Enum):
    """
    Estados possíveis de uma conta.

    Fluxo de Estados:
        IN_USE → UNREGISTERED (uma única vez, via encerramento)
    """

    IN_USE = "IN_USE"
    UNREGISTERED = "UNREGISTERED"


@dataclass(frozen=True)
class UserEntity:
    """Titular de contas. Imutável do ponto de vista do ledger."""

    id: int
    name: str = ""


@dataclass
class AccountEntity:
    """
    Entidade de Domínio: Conta.

    Invariantes:
    - balance >= 0 antes e depois de qualquer operação
    - account_number é imutável após a criação
    - Conta UNREGISTERED tinha saldo zero no encerramento e
      nunca mais é alterada

    Attributes:
        id: Identificador atribuído pelo armazenamento (None até salvar)
        owner_user_id: ID do usuário titular
        account_number: Número da conta (string numérica, única)
        balance: Saldo na menor unidade monetária
        status: IN_USE ou UNREGISTERED
        registered_at: Momento da abertura
        unregistered_at: Momento do encerramento (apenas se encerrada)

    Example:
        account = AccountEntity.open(
            owner_user_id=1,
            account_number="1000000000",
            initial_balance=10000,
        )
        account.debit(200)
        assert account.balance == 9800
    """

    id: Optional[int] = None
    owner_user_id: Optional[int] = None
    account_number: str = ""
    balance: int = 0
    status: AccountStatus = AccountStatus.IN_USE
    registered_at: datetime = field(default_factory=utc_now)
    unregistered_at: Optional[datetime] = None

    GENESIS_ACCOUNT_NUMBER: ClassVar[str] = "1000000000"

    @classmethod
    def open(
        cls,
        owner_user_id: int,
        account_number: str,
        initial_balance: int = 0,
    ) -> "AccountEntity":
        """
        Factory method para abrir conta com validações.

        Args:
            owner_user_id: ID do usuário titular
            account_number: Número calculado por next_account_number()
            initial_balance: Saldo inicial (>= 0)

        Returns:
            Nova conta IN_USE com registered_at = agora

        Raises:
            ValidationError: Se saldo inicial negativo ou número vazio
        """
        cls._validar_valor(initial_balance, field="initial_balance", allow_zero=True)
        if not account_number:
            raise ValidationError(
                "Número da conta é obrigatório",
                field="account_number"
            )

        return cls(
            owner_user_id=owner_user_id,
            account_number=account_number,
            balance=initial_balance,
            status=AccountStatus.IN_USE,
            registered_at=utc_now(),
        )

    @classmethod
    def next_account_number(cls, latest: Optional["AccountEntity"]) -> str:
        """
        Calcula o próximo número de conta.

        Usa a conta de maior id (a criada mais recentemente): o número
        dela interpretado como inteiro, mais um. Sem contas, retorna o
        número gênese.
        """
        if latest is None:
            return cls.GENESIS_ACCOUNT_NUMBER
        return str(int(latest.account_number) + 1)

    @staticmethod
    def _validar_valor(amount: int, field: str = "amount", allow_zero: bool = False) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(
                "Valor deve ser um número inteiro",
                field=field
            )
        if amount < 0 or (amount == 0 and not allow_zero):
            raise ValidationError(
                "Valor deve ser positivo" if not allow_zero else "Valor não pode ser negativo",
                field=field
            )

    # =========================================================================
    # Verificações
    # =========================================================================

    @property
    def is_in_use(self) -> bool:
        return self.status == AccountStatus.IN_USE

    def ensure_owned_by(self, user_id: int) -> None:
        if self.owner_user_id != user_id:
            raise OwnerMismatchError(user_id, self.account_number)

    def ensure_in_use(self) -> None:
        if not self.is_in_use:
            raise AlreadyClosedError(self.account_number)

    # =========================================================================
    # Comportamentos
    # =========================================================================

    def close(self, user_id: int) -> None:
        """
        Encerra a conta.

        Valida, nesta ordem: titularidade, conta ainda em uso, saldo zero.

        Raises:
            OwnerMismatchError: Conta de outro usuário
            AlreadyClosedError: Conta já encerrada
            BalanceNotEmptyError: Saldo diferente de zero
        """
        self.ensure_owned_by(user_id)
        self.ensure_in_use()
        if self.balance > 0:
            raise BalanceNotEmptyError(self.account_number, self.balance)

        self.status = AccountStatus.UNREGISTERED
        self.unregistered_at = utc_now()

    def ensure_can_use(self, user_id: int, amount: int) -> None:
        """
        Valida um débito sem alterar o saldo.

        Ordem: valor positivo, titularidade, conta em uso, saldo suficiente.

        Raises:
            ValidationError: Valor não positivo
            OwnerMismatchError: Conta de outro usuário
            AlreadyClosedError: Conta encerrada
            AmountExceedsBalanceError: Valor maior que o saldo
        """
        self._validar_valor(amount)
        self.ensure_owned_by(user_id)
        self.ensure_in_use()
        if amount > self.balance:
            raise AmountExceedsBalanceError(self.account_number, amount, self.balance)

    def debit(self, amount: int) -> None:
        """Subtrai amount do saldo. Nunca deixa o saldo negativo."""
        self._validar_valor(amount)
        if amount > self.balance:
            raise AmountExceedsBalanceError(self.account_number, amount, self.balance)
        self.balance -= amount

    def credit(self, amount: int) -> None:
        """Soma amount ao saldo (estorno)."""
        self._validar_valor(amount)
        self.balance += amount
