from typing import Optional, Dict, Any
import asyncio
import json

import redis.asyncio as redis
from redis.exceptions import RedisError

from reworkit.common.dto.build import Package
from reworkit.common.config.constants import STORE_KEY_NAMESPACE, StoreBackend
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.storage_exceptions import (
    PackageNotFoundError,
    StoreConnectionError,
    StoreException,
)
from reworkit.storage.result_store import ResultStore


logger = get_logger(__name__)


class RedisResultStore(ResultStore):
    """Document-store backend: one JSON document per package.

    Every ``upsert`` is a fetch-merge-store cycle, so all store access goes
    through a single-writer lock. Without it two submissions for different
    arches of the same package could each drop the other's result.
    """

    backend = StoreBackend.REDIS

    def __init__(
        self,
        redis_url: str,
        namespace: str = STORE_KEY_NAMESPACE,
        client: Optional[redis.Redis] = None,
    ):
        self._redis_url = redis_url
        self._namespace = namespace
        self._client = client
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        if self._client is None:
            self._client = redis.from_url(self._redis_url)

        try:
            await self._client.ping()
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreConnectionError(
                message=f"Redis connection failed: {e}",
                backend=self.backend.value,
                cause=e,
            )

        logger.info("Redis result store initialized")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    def key(self, name: str) -> str:
        return f"{self._namespace}:{name}"

    async def get(self, name: str) -> Package:
        async with self._lock:
            package = await self._load(name)

        if package is None:
            raise PackageNotFoundError(name)
        return package

    async def upsert(self, name: str, arch: str, success: bool, log: str) -> None:
        self.validate_result(name, arch, success, log)

        async with self._lock:
            package = await self._load(name)
            if package is None:
                package = Package(name=name)

            package.record(arch, success, log)
            await self._store(package)

        logger.debug(f"Recorded {name}/{arch} success={success}")

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._require_client().ping()
            return {"status": "healthy", "backend": self.backend.value}
        except (RedisError, StoreException) as e:
            logger.error(f"Redis health check failed: {e}")
            return {"status": "unhealthy", "backend": self.backend.value, "error": str(e)}

    async def _load(self, name: str) -> Optional[Package]:
        try:
            raw = await self._require_client().get(self.key(name))
        except RedisError as e:
            raise StoreException(
                message=f"Failed to read package {name}: {e}",
                operation="get",
                backend=self.backend.value,
                package=name,
                cause=e,
            )

        if raw is None:
            return None

        try:
            return Package.from_document(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            raise StoreException(
                message=f"Corrupt document for package {name}: {e}",
                operation="decode",
                backend=self.backend.value,
                package=name,
                cause=e,
            )

    async def _store(self, package: Package) -> None:
        payload = json.dumps(package.to_document())
        try:
            await self._require_client().set(self.key(package.name), payload)
        except RedisError as e:
            raise StoreException(
                message=f"Failed to write package {package.name}: {e}",
                operation="set",
                backend=self.backend.value,
                package=package.name,
                cause=e,
            )

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise StoreException(
                message="Redis store not initialized. Call initialize() first.",
                backend=self.backend.value,
            )
        return self._client
