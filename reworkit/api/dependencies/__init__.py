from reworkit.api.dependencies.auth import verify_secret
from reworkit.api.dependencies.store import get_result_store, get_log_sink

__all__ = [
    "verify_secret",
    "get_result_store",
    "get_log_sink",
]
