from reworkit.common.config.settings import (
    CollectorSettings,
    WorkerSettings,
    get_collector_settings,
    get_worker_settings,
)
from reworkit.common.config.logging_config import setup_logging, get_logger, get_build_logger
from reworkit.common.config.constants import (
    WorkerState,
    StoreBackend,
    log_filename,
)

__all__ = [
    "CollectorSettings",
    "WorkerSettings",
    "get_collector_settings",
    "get_worker_settings",
    "setup_logging",
    "get_logger",
    "get_build_logger",
    "WorkerState",
    "StoreBackend",
    "log_filename",
]
