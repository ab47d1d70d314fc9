"""
Django Forms para validação de entrada da API JSON.

Forms são DRIVING ADAPTERS que validam dados antes de
passar para os Use Cases.

Responsabilidades:
- Validação estrutural (campos obrigatórios, tipos, faixas)
- Mensagens de erro amigáveis

Princípios:
- Forms NÃO contêm lógica de negócio (saldo, titularidade, etc.)
- Limites aqui são de formato da requisição
"""

from django import forms
from django.core.validators import RegexValidator

MIN_AMOUNT = 10
MAX_AMOUNT = 1_000_000_000
ACCOUNT_NUMBER_LENGTH = 10
# Limite de PositiveBigIntegerField
MAX_BALANCE = 9_223_372_036_854_775_807


def user_id_field() -> forms.IntegerField:
    return forms.IntegerField(
        min_value=1,
        error_messages={
            'required': 'ID do usuário é obrigatório',
            'invalid': 'ID do usuário deve ser um número inteiro',
            'min_value': 'ID do usuário deve ser maior que zero',
        },
    )


def account_number_field() -> forms.CharField:
    return forms.CharField(
        min_length=ACCOUNT_NUMBER_LENGTH,
        max_length=ACCOUNT_NUMBER_LENGTH,
        validators=[RegexValidator(r'^\d+$', 'Número da conta deve conter apenas dígitos')],
        error_messages={
            'required': 'Número da conta é obrigatório',
            'min_length': f'Número da conta deve ter {ACCOUNT_NUMBER_LENGTH} dígitos',
            'max_length': f'Número da conta deve ter {ACCOUNT_NUMBER_LENGTH} dígitos',
        },
    )


def amount_field() -> forms.IntegerField:
    return forms.IntegerField(
        min_value=MIN_AMOUNT,
        max_value=MAX_AMOUNT,
        error_messages={
            'required': 'Valor é obrigatório',
            'invalid': 'Valor deve ser um número inteiro',
            'min_value': f'Valor mínimo é {MIN_AMOUNT}',
            'max_value': f'Valor máximo é {MAX_AMOUNT}',
        },
    )


class CreateAccountForm(forms.Form):
    """Valida abertura de conta antes do CreateAccountService."""

    user_id = user_id_field()
    initial_balance = forms.IntegerField(
        min_value=0,
        max_value=MAX_BALANCE,
        error_messages={
            'required': 'Saldo inicial é obrigatório',
            'invalid': 'Saldo inicial deve ser um número inteiro',
            'min_value': 'Saldo inicial não pode ser negativo',
            'max_value': f'Saldo inicial máximo é {MAX_BALANCE}',
        },
    )


class CloseAccountForm(forms.Form):
    """Valida encerramento; o número da conta vem da URL."""

    user_id = user_id_field()
    account_number = account_number_field()


class UseBalanceForm(forms.Form):
    user_id = user_id_field()
    account_number = account_number_field()
    amount = amount_field()


class CancelBalanceForm(forms.Form):
    transaction_id = forms.CharField(
        max_length=64,
        error_messages={
            'required': 'ID da transação é obrigatório',
        },
    )
    account_number = account_number_field()
    amount = amount_field()


class ListAccountsForm(forms.Form):
    """Query string de GET /accounts/."""

    user_id = user_id_field()
