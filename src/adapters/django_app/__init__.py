"""
Adapters Django - Driven e Driving Adapters do ledger.

- shared: UnitOfWork, locks de conta e configuração de banco
- events: publicadores e handlers Celery de Domain Events
- ledger: app Django com models, repositórios e API JSON
"""
