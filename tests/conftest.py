import asyncio
import gzip
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from reworkit.api.server import create_app
from reworkit.common.config.settings import CollectorSettings
from reworkit.storage.log_storage import LogBlobSink
from reworkit.storage.result_store import InMemoryResultStore


SECRET = "s3cret"


class FakeRedis:
    """Async stand-in for the handful of redis commands the store uses.

    Every command yields to the event loop so that unsynchronized
    read-modify-write sequences would actually interleave.
    """

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.closed = False

    async def ping(self) -> bool:
        await asyncio.sleep(0)
        return True

    async def get(self, key: str) -> Optional[bytes]:
        await asyncio.sleep(0)
        return self.data.get(key)

    async def set(self, key: str, value) -> bool:
        await asyncio.sleep(0)
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        return True

    async def aclose(self) -> None:
        self.closed = True


def gz(data: bytes) -> bytes:
    return gzip.compress(data)


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def collector_settings(log_dir):
    return CollectorSettings(
        secret=SECRET,
        log_dir=log_dir,
        store_url="memory://",
        json_logs=False,
    )


@pytest.fixture
def result_store():
    return InMemoryResultStore()


@pytest.fixture
def log_sink(log_dir):
    return LogBlobSink(log_dir)


@pytest.fixture
def app(collector_settings, result_store, log_sink):
    return create_app(settings=collector_settings, store=result_store, log_sink=log_sink)


@pytest.fixture
def fake_redis():
    return FakeRedis()
