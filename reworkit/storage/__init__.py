from reworkit.storage.result_store import ResultStore, InMemoryResultStore
from reworkit.storage.redis_store import RedisResultStore
from reworkit.storage.sql_store import SqlResultStore
from reworkit.storage.factory import create_result_store, detect_backend
from reworkit.storage.log_storage import LogBlobSink

__all__ = [
    "ResultStore",
    "InMemoryResultStore",
    "RedisResultStore",
    "SqlResultStore",
    "create_result_store",
    "detect_backend",
    "LogBlobSink",
]
