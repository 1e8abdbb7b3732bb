from typing import Dict, Any
from abc import ABC, abstractmethod
import asyncio

from pydantic import ValidationError

from reworkit.common.dto.build import BuildResult, Package
from reworkit.common.config.constants import StoreBackend
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.base_exceptions import ValidationException
from reworkit.common.exceptions.storage_exceptions import PackageNotFoundError


logger = get_logger(__name__)


class ResultStore(ABC):
    """Durable map from package name to its per-architecture build results.

    This is the only persistence contract the collector depends on. ``upsert``
    must be safe under concurrent calls for different packages and for
    different arches of one package; two racing upserts of the same
    (name, arch) leave exactly one of the two values behind. Every backend
    refuses a result that ``get`` could not load back.
    """

    backend: StoreBackend

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def get(self, name: str) -> Package:
        raise NotImplementedError("Subclasses must implement get method")

    @abstractmethod
    async def upsert(self, name: str, arch: str, success: bool, log: str) -> None:
        raise NotImplementedError("Subclasses must implement upsert method")

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "backend": self.backend.value}

    @staticmethod
    def validate_result(name: str, arch: str, success: bool, log: str) -> BuildResult:
        if not name:
            raise ValidationException.empty_field("package")

        try:
            return BuildResult(arch=arch, success=success, log=log)
        except ValidationError as e:
            raise ValidationException(
                message=f"Invalid result for {name}: {e.errors()[0]['msg']}",
                field_name="arch",
            )


class InMemoryResultStore(ResultStore):
    backend = StoreBackend.MEMORY

    def __init__(self):
        self._packages: Dict[str, Package] = {}
        self._lock = asyncio.Lock()

    async def get(self, name: str) -> Package:
        async with self._lock:
            package = self._packages.get(name)
            if package is None:
                raise PackageNotFoundError(name)
            return package.model_copy(deep=True)

    async def upsert(self, name: str, arch: str, success: bool, log: str) -> None:
        self.validate_result(name, arch, success, log)

        async with self._lock:
            package = self._packages.get(name)
            if package is None:
                package = Package(name=name)
                self._packages[name] = package
            package.record(arch, success, log)

        logger.debug(f"Recorded {name}/{arch} success={success}")
