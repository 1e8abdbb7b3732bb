from fastapi import Request

from reworkit.storage.result_store import ResultStore
from reworkit.storage.log_storage import LogBlobSink


def get_result_store(request: Request) -> ResultStore:
    return request.app.state.store


def get_log_sink(request: Request) -> LogBlobSink:
    return request.app.state.log_sink
