from typing import Optional, Dict, Any, Callable
import asyncio
import functools

from sqlalchemy import (
    Boolean,
    Column,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    select,
    text,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from reworkit.common.dto.build import BuildResult, Package
from reworkit.common.config.constants import BUILD_RESULT_TABLE, StoreBackend
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.storage_exceptions import (
    PackageNotFoundError,
    StoreConnectionError,
    StoreException,
)
from reworkit.storage.result_store import ResultStore


logger = get_logger(__name__)

metadata = MetaData()

build_result = Table(
    BUILD_RESULT_TABLE,
    metadata,
    Column("name", Text, nullable=False),
    Column("arch", Text, nullable=False),
    Column("success", Boolean, nullable=False),
    Column("log", Text, nullable=False),
    UniqueConstraint("name", "arch"),
)

UPSERT_DIALECTS: Dict[str, Callable] = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def create_store_engine(url: str) -> Engine:
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(url, pool_pre_ping=True)


class SqlResultStore(ResultStore):
    """Relational backend: one ``build_result`` row per (name, arch).

    ``upsert`` is a single ``INSERT ... ON CONFLICT (name, arch) DO UPDATE``
    statement; the unique constraint keeps one row per pair, so no
    application lock is taken except for in-memory SQLite, whose single
    shared connection is used by one call at a time.
    """

    backend = StoreBackend.SQL

    def __init__(self, url: str, engine: Optional[Engine] = None):
        self._url = url
        self._engine = engine
        self._lock = asyncio.Lock()
        self._single_connection = False

    async def initialize(self) -> None:
        if self._engine is None:
            self._engine = create_store_engine(self._url)

        self._single_connection = isinstance(self._engine.pool, StaticPool)
        dialect = self._engine.dialect.name
        if dialect not in UPSERT_DIALECTS:
            raise StoreConnectionError(
                message=f"Unsupported database dialect for upsert: {dialect}",
                backend=self.backend.value,
            )

        try:
            await self._run(metadata.create_all, self._engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database: {e}")
            raise StoreConnectionError(
                message=f"Database initialization failed: {e}",
                backend=self.backend.value,
                cause=e,
            )

        logger.info(f"SQL result store initialized: {dialect}")

    async def close(self) -> None:
        if self._engine is not None:
            await self._run(self._engine.dispose)
            self._engine = None
            logger.info("Database engine disposed")

    async def get(self, name: str) -> Package:
        try:
            rows = await self._run(self._select_rows, name)
        except SQLAlchemyError as e:
            raise StoreException(
                message=f"Failed to read package {name}: {e}",
                operation="get",
                backend=self.backend.value,
                package=name,
                cause=e,
            )

        if not rows:
            raise PackageNotFoundError(name)

        return Package(
            name=name,
            results=[
                BuildResult(arch=row.arch, success=row.success, log=row.log)
                for row in rows
            ],
        )

    async def upsert(self, name: str, arch: str, success: bool, log: str) -> None:
        self.validate_result(name, arch, success, log)

        try:
            await self._run(self._upsert_row, name, arch, success, log)
        except SQLAlchemyError as e:
            raise StoreException(
                message=f"Failed to record {name}/{arch}: {e}",
                operation="upsert",
                backend=self.backend.value,
                package=name,
                cause=e,
            )

        logger.debug(f"Recorded {name}/{arch} success={success}")

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._run(self._ping)
            return {"status": "healthy", "backend": self.backend.value}
        except (SQLAlchemyError, StoreException) as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "backend": self.backend.value, "error": str(e)}

    def _select_rows(self, name: str):
        query = (
            select(build_result.c.arch, build_result.c.success, build_result.c.log)
            .where(build_result.c.name == name)
            .order_by(build_result.c.arch)
        )
        with self._require_engine().connect() as conn:
            return conn.execute(query).all()

    def _upsert_row(self, name: str, arch: str, success: bool, log: str) -> None:
        engine = self._require_engine()
        insert = UPSERT_DIALECTS[engine.dialect.name]

        stmt = insert(build_result).values(name=name, arch=arch, success=success, log=log)
        stmt = stmt.on_conflict_do_update(
            index_elements=[build_result.c.name, build_result.c.arch],
            set_={"success": stmt.excluded.success, "log": stmt.excluded.log},
        )

        with engine.begin() as conn:
            conn.execute(stmt)

    def _ping(self) -> None:
        with self._require_engine().connect() as conn:
            conn.execute(text("SELECT 1"))

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise StoreException(
                message="SQL store not initialized. Call initialize() first.",
                backend=self.backend.value,
            )
        return self._engine

    async def _run(self, func: Callable, *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        call = functools.partial(func, *args)

        if self._single_connection:
            async with self._lock:
                return await loop.run_in_executor(None, call)
        return await loop.run_in_executor(None, call)
