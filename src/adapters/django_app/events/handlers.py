"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados via Celery quando Domain Events do ledger
são publicados pelo CeleryEventPublisher.

Tipos de Handlers:
- Auditoria: linha de log estruturada por evento
- Métricas: contadores de contas e volume movimentado
- Agendados: resumo diário de atividade (Celery Beat)

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        ...
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from celery import shared_task
from django.db.models import Count, Sum
from django.utils import timezone

logger = logging.getLogger(__name__)

audit_logger = logging.getLogger("ledger.audit")


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get('data', {})


# =============================================================================
# Event Handlers - Contas
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_account_created(self, event_data: Dict[str, Any]) -> None:
    """Audita abertura de conta e incrementa métrica."""
    data = _payload(event_data)
    audit_logger.info(
        f"[AUDIT] AccountCreated account={event_data.get('aggregate_id')} "
        f"user={data.get('user_id')} initial_balance={data.get('initial_balance')}"
    )
    record_metric.delay(metric_name='accounts_created', value=1)


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_account_closed(self, event_data: Dict[str, Any]) -> None:
    """Audita encerramento de conta e incrementa métrica."""
    data = _payload(event_data)
    audit_logger.info(
        f"[AUDIT] AccountClosed account={event_data.get('aggregate_id')} "
        f"user={data.get('user_id')}"
    )
    record_metric.delay(metric_name='accounts_closed', value=1)


# =============================================================================
# Event Handlers - Transações
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_balance_used(self, event_data: Dict[str, Any]) -> None:
    data = _payload(event_data)
    audit_logger.info(
        f"[AUDIT] BalanceUsed account={event_data.get('aggregate_id')} "
        f"transaction={data.get('transaction_id')} amount={data.get('amount')} "
        f"balance={data.get('balance_snapshot')}"
    )
    record_metric.delay(
        metric_name='balance_used_amount',
        value=data.get('amount', 0),
        tags={'result': 'SUCCESS'},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_balance_use_failed(self, event_data: Dict[str, Any]) -> None:
    """Débitos recusados merecem WARNING: podem indicar abuso."""
    data = _payload(event_data)
    audit_logger.warning(
        f"[AUDIT] BalanceUseFailed account={event_data.get('aggregate_id')} "
        f"transaction={data.get('transaction_id')} amount={data.get('amount')} "
        f"balance={data.get('balance_snapshot')}"
    )
    record_metric.delay(
        metric_name='balance_use_failures',
        value=1,
        tags={'result': 'FAIL'},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_balance_canceled(self, event_data: Dict[str, Any]) -> None:
    data = _payload(event_data)
    audit_logger.info(
        f"[AUDIT] BalanceCanceled account={event_data.get('aggregate_id')} "
        f"transaction={data.get('transaction_id')} "
        f"original={data.get('original_transaction_id')} amount={data.get('amount')}"
    )
    record_metric.delay(metric_name='balance_canceled_amount', value=data.get('amount', 0))


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'AccountCreatedEvent': handle_account_created,
    'AccountClosedEvent': handle_account_closed,
    'BalanceUsedEvent': handle_balance_used,
    'BalanceUseFailedEvent': handle_balance_use_failed,
    'BalanceCanceledEvent': handle_balance_canceled,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'BalanceUsedEvent')
        event_data: Evento serializado (DomainEvent.to_dict())

    Returns:
        True se algum handler foi acionado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler is None:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
        return False

    logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
    handler.delay(event_data)
    return True


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Scheduled Tasks (Celery Beat)
# =============================================================================

@shared_task(bind=True)
def summarize_ledger_activity(self, hours: int = 24) -> Dict[str, Any]:
    """
    Resume os lançamentos das últimas ``hours`` horas.

    Executada diariamente pelo Celery Beat.

    Returns:
        Dict {"TYPE/RESULT": {"count": n, "amount": total}, ...}
    """
    from src.adapters.django_app.ledger.models import TransactionModel

    since = timezone.now() - timedelta(hours=hours)
    rows = (
        TransactionModel.objects
        .filter(transacted_at__gte=since)
        .values('transaction_type', 'transaction_result')
        .annotate(count=Count('id'), amount=Sum('amount'))
        .order_by('transaction_type', 'transaction_result')
    )

    summary = {
        f"{row['transaction_type']}/{row['transaction_result']}": {
            'count': row['count'],
            'amount': row['amount'] or 0,
        }
        for row in rows
    }
    logger.info(f"[SCHEDULED] Ledger activity (last {hours}h): {summary}")
    return summary
