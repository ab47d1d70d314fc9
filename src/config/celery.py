"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events do ledger (auditoria, métricas)
- Tarefas agendadas (resumo diário de atividade)

Arquitetura:
- Broker: RabbitMQ ou Redis (CELERY_BROKER_URL)
- Backend: Redis (CELERY_RESULT_BACKEND)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO -Q default,events

    # Iniciar beat (tarefas agendadas)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('ledger')

# Broker, backend e modo eager vêm das settings CELERY_*
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    enable_utc=True,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,
)

app.conf.task_default_queue = 'default'
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
)

app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

app.conf.beat_schedule = {
    # Resumo diário às 6h (UTC)
    'summarize-ledger-activity': {
        'task': 'src.adapters.django_app.events.handlers.summarize_ledger_activity',
        'schedule': crontab(hour=6, minute=0),
        'kwargs': {'hours': 24},
    },
}
