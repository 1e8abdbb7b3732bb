from typing import Optional

from reworkit.common.config.constants import StoreBackend
from reworkit.common.config.logging_config import get_logger
from reworkit.storage.result_store import ResultStore, InMemoryResultStore
from reworkit.storage.redis_store import RedisResultStore
from reworkit.storage.sql_store import SqlResultStore


logger = get_logger(__name__)

REDIS_SCHEMES = {"redis", "rediss", "unix"}


def detect_backend(url: str) -> StoreBackend:
    scheme = url.split(":", 1)[0].lower() if ":" in url else ""

    if scheme == "memory":
        return StoreBackend.MEMORY
    if scheme in REDIS_SCHEMES:
        return StoreBackend.REDIS
    return StoreBackend.SQL


def create_result_store(url: str, backend: Optional[StoreBackend] = None) -> ResultStore:
    backend = backend or detect_backend(url)
    logger.info(f"Using {backend.value} result store")

    if backend == StoreBackend.MEMORY:
        return InMemoryResultStore()
    if backend == StoreBackend.REDIS:
        return RedisResultStore(url)
    return SqlResultStore(url)
