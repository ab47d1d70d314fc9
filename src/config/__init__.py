"""
Configuração do projeto Account Ledger.

Módulos:
- settings: Configurações Django (python-dotenv)
- test_settings: Configurações para a suíte de testes
- urls: Rotas principais
- celery: Configuração Celery para tarefas assíncronas
- container: Dependency Injection Container
"""

from .celery import app as celery_app

__all__ = ('celery_app',)
