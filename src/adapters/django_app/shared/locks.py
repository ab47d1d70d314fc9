"""
Lock de conta via cache do Django.

Serializa débitos e cancelamentos sobre a mesma conta entre processos.
Com REDIS_URL configurado o cache é o Redis, e o lock vale para todos
os workers; com LocMemCache vale apenas para o processo.

Funcionamento:
    cache.add() só grava se a chave não existir, o que o torna um
    "SET NX" portátil. A chave expira sozinha após ``timeout`` segundos,
    de modo que um worker morto não prende a conta para sempre.
"""

from contextlib import contextmanager
from typing import Iterator
import logging
import time
import uuid

from django.core.cache import caches

from src.core.shared.exceptions import ConcurrencyError
from src.core.shared.interfaces import AccountLock

logger = logging.getLogger(__name__)


class CacheAccountLock(AccountLock):
    """
    AccountLock sobre o cache do Django.

    Example:
        lock = CacheAccountLock(timeout=5, wait_timeout=3)
        with lock.hold("1000000000"):
            service.execute(...)
    """

    key_prefix = "ledger:account-lock:"

    def __init__(
        self,
        timeout: float = 5,
        wait_timeout: float = 3,
        poll_interval: float = 0.05,
        cache_alias: str = "default",
    ):
        """
        Args:
            timeout: Expiração da chave (segundos)
            wait_timeout: Tempo máximo de espera pelo lock (segundos)
            poll_interval: Intervalo entre tentativas (segundos)
            cache_alias: Alias em settings.CACHES
        """
        self.timeout = timeout
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval
        self.cache_alias = cache_alias

    @property
    def cache(self):
        return caches[self.cache_alias]

    def _key(self, account_number: str) -> str:
        return f"{self.key_prefix}{account_number}"

    @contextmanager
    def hold(self, account_number: str) -> Iterator[None]:
        key = self._key(account_number)
        token = uuid.uuid4().hex
        deadline = time.monotonic() + self.wait_timeout

        while not self.cache.add(key, token, self.timeout):
            if time.monotonic() >= deadline:
                logger.warning(f"Lock wait exceeded for account {account_number}")
                raise ConcurrencyError(
                    f"Conta {account_number} está em uso por outra transação"
                )
            time.sleep(self.poll_interval)

        logger.debug(f"Lock acquired for account {account_number}")
        try:
            yield
        finally:
            # Só libera se o lock ainda é nosso (pode ter expirado)
            if self.cache.get(key) == token:
                self.cache.delete(key)
                logger.debug(f"Lock released for account {account_number}")
