from enum import Enum
from typing import Final


class WorkerState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    LISTING = "listing"
    UPDATING_ENVIRONMENT = "updating_environment"
    BUILDING = "building"
    COMPRESSING = "compressing"
    SUBMITTING = "submitting"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"
    SQL = "sql"


STORE_KEY_NAMESPACE: Final[str] = "reworkit"
BUILD_RESULT_TABLE: Final[str] = "build_result"

SECRET_HEADER: Final[str] = "SECRET"
USER_AGENT: Final[str] = "reworkit"

PUSH_LOG_PATH: Final[str] = "/push_log"
GET_PACKAGE_PATH: Final[str] = "/get"

TREE_DIR_NAME: Final[str] = "TREE"
VCS_METADATA_SEGMENT: Final[str] = "/.git"
RESERVED_TREE_DIRS: Final[tuple] = ("groups", "assets")

STDOUT_HEADER: Final[bytes] = b"STDOUT:\n"
STDERR_HEADER: Final[bytes] = b"STDERR:\n"

MAX_SUBMIT_ATTEMPTS: Final[int] = 3
SUBMIT_RETRY_DELAY_SECONDS: Final[int] = 10
CYCLE_INTERVAL_SECONDS: Final[int] = 10
REQUEST_TIMEOUT_SECONDS: Final[int] = 300

LOG_FILENAME_TEMPLATE: Final[str] = "{package}-{arch}.log"


def log_filename(package: str, arch: str) -> str:
    return LOG_FILENAME_TEMPLATE.format(package=package, arch=arch)
