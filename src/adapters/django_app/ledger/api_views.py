"""
API Views JSON para contas e transações.

Endpoints:
- GET  /ledger/api/accounts/?user_id=<id> - Listar contas do usuário
- POST /ledger/api/accounts/ - Abrir conta
- POST /ledger/api/accounts/<account_number>/close/ - Encerrar conta
- POST /ledger/api/transactions/use/ - Debitar saldo
- POST /ledger/api/transactions/cancel/ - Cancelar débito
- GET  /ledger/api/transactions/<transaction_id>/ - Consultar transação

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Status HTTP:
- 400: Validação de entrada / JSON inválido
- 404: Usuário, conta ou transação inexistente
- 409: Conta bloqueada por outra transação
- 422: Regra de negócio violada
"""

import json
import logging
from typing import Any, Dict

from django import forms
from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.core.accounts.dtos import CloseAccountInputDTO, CreateAccountInputDTO
from src.core.transactions.dtos import CancelBalanceInputDTO, UseBalanceInputDTO
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)
from src.config.container import get_container

from .forms import (
    CancelBalanceForm,
    CloseAccountForm,
    CreateAccountForm,
    ListAccountsForm,
    UseBalanceForm,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    # safe=False permite listas em data
    return JsonResponse(response, status=status, safe=False)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Raises:
        ValidationError: Se o body não for um objeto JSON
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValidationError("Corpo da requisição deve ser um objeto JSON")
    return data


def validate_form(form: forms.Form) -> Dict[str, Any]:
    """
    Valida form e retorna cleaned_data.

    Raises:
        ValidationError: Com o primeiro campo inválido
    """
    if form.is_valid():
        return form.cleaned_data

    field, messages = next(iter(form.errors.items()))
    raise ValidationError(messages[0], field=field)


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container pelo nome do provider."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """Traduz exceções de domínio para status HTTP."""
        meta = {}
        if isinstance(e, DomainException) and e.error_code is not None:
            meta['error_code'] = e.error_code.value

        if isinstance(e, ValidationError):
            meta['field'] = e.field
            return json_response(success=False, error=str(e), status=400, meta=meta)

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=str(e), status=404, meta=meta)

        if isinstance(e, BusinessRuleViolationError):
            meta['rule'] = e.rule
            return json_response(success=False, error=str(e), status=422, meta=meta)

        if isinstance(e, ConcurrencyError):
            return json_response(success=False, error=str(e), status=409)

        if isinstance(e, DomainException):
            return json_response(success=False, error=str(e), status=400, meta=meta)

        logger.exception(f"Unexpected API error: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Contas
# =============================================================================

class AccountAPIListView(BaseAPIView):
    """
    GET /ledger/api/accounts/?user_id=1 - Lista contas
    POST /ledger/api/accounts/ - Abre conta
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        data = validate_form(ListAccountsForm(data=request.GET))

        accounts = self.get_service('list_accounts_service').execute(data['user_id'])

        return json_response(
            success=True,
            data=[a.to_dict() for a in accounts],
            meta={'total': len(accounts)},
        )

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "user_id": int >= 1,
            "initial_balance": int >= 0
        }
        """
        data = validate_form(CreateAccountForm(data=self.parse_body(request)))

        output = self.get_service('create_account_service').execute(
            CreateAccountInputDTO(
                user_id=data['user_id'],
                initial_balance=data['initial_balance'],
            )
        )

        logger.info(f"API: account created: {output.account_number}")
        return json_response(success=True, data=output.to_dict(), status=201)


class AccountAPICloseView(BaseAPIView):
    """
    POST /ledger/api/accounts/<account_number>/close/

    Body JSON: {"user_id": int >= 1}
    """

    def post(self, request: HttpRequest, account_number: str) -> JsonResponse:
        body = self.parse_body(request)
        data = validate_form(CloseAccountForm(data={**body, 'account_number': account_number}))

        output = self.get_service('close_account_service').execute(
            CloseAccountInputDTO(
                user_id=data['user_id'],
                account_number=data['account_number'],
            )
        )

        logger.info(f"API: account closed: {output.account_number}")
        return json_response(success=True, data=output.to_dict())


# =============================================================================
# Transações
# =============================================================================

class TransactionAPIUseView(BaseAPIView):
    """
    POST /ledger/api/transactions/use/

    Body JSON:
    {
        "user_id": int >= 1,
        "account_number": "10 dígitos",
        "amount": int entre 10 e 1_000_000_000
    }

    Saldo insuficiente responde 422 e deixa um lançamento FAIL.
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        data = validate_form(UseBalanceForm(data=self.parse_body(request)))

        output = self.get_service('use_balance_service').execute(
            UseBalanceInputDTO(
                user_id=data['user_id'],
                account_number=data['account_number'],
                amount=data['amount'],
            )
        )
        return json_response(success=True, data=output.to_dict())


class TransactionAPICancelView(BaseAPIView):
    """
    POST /ledger/api/transactions/cancel/

    Body JSON:
    {
        "transaction_id": "string",
        "account_number": "10 dígitos",
        "amount": int (valor total da transação original)
    }
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        data = validate_form(CancelBalanceForm(data=self.parse_body(request)))

        output = self.get_service('cancel_balance_service').execute(
            CancelBalanceInputDTO(
                transaction_id=data['transaction_id'],
                account_number=data['account_number'],
                amount=data['amount'],
            )
        )
        return json_response(success=True, data=output.to_dict())


class TransactionAPIDetailView(BaseAPIView):
    """GET /ledger/api/transactions/<transaction_id>/"""

    def get(self, request: HttpRequest, transaction_id: str) -> JsonResponse:
        output = self.get_service('query_transaction_service').execute(transaction_id)
        return json_response(success=True, data=output.to_dict())


# =============================================================================
# Health
# =============================================================================

def health_view(request: HttpRequest) -> JsonResponse:
    from ..shared.database import check_database_connection

    database = check_database_connection()
    return JsonResponse(
        {'status': 'ok' if database['healthy'] else 'degraded', 'database': database},
        status=200 if database['healthy'] else 503,
    )
