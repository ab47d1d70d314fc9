"""
Configurações globais do Pytest para o Account Ledger.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.

Django é configurado pelo pytest-django a partir de
DJANGO_SETTINGS_MODULE (src.config.test_settings, via pyproject.toml).
"""

import json
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container global entre testes.

    Garante que cada teste inicia com repositórios e publisher limpos.
    """
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Pula testes de integração pesados sem --run-integration."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(reason="use --run-integration para executar")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


# =============================================================================
# Fixtures Django (adapters e integração)
# =============================================================================

@pytest.fixture
def user_factory(db):
    """Factory para criar AccountUserModel."""
    from src.adapters.django_app.ledger.models import AccountUserModel

    def create_user(name: str = "Pobi"):
        return AccountUserModel.objects.create(name=name)

    return create_user


@pytest.fixture
def event_publisher():
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher

    return InMemoryEventPublisher()


@pytest.fixture
def container(event_publisher):
    """
    Container global com adapters Django reais.

    Só o publisher é trocado, para inspecionar os eventos.
    """
    from dependency_injector import providers
    from src.config.container import get_container

    ledger_container = get_container()
    ledger_container.event_publisher.override(providers.Object(event_publisher))
    yield ledger_container
    ledger_container.event_publisher.reset_override()


@pytest.fixture
def post_json(client):
    """POST com corpo JSON pelo Django test client."""

    def _post(url: str, payload=None):
        body = json.dumps(payload) if payload is not None else ''
        return client.post(url, data=body, content_type='application/json')

    return _post
