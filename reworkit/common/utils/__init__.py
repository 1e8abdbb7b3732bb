from reworkit.common.utils.retry import (
    RetryConfig,
    async_with_retry,
)
from reworkit.common.utils.file_utils import (
    ensure_directory,
    atomic_write_bytes,
)
from reworkit.common.utils.log_codec import LogCodec

__all__ = [
    "RetryConfig",
    "async_with_retry",
    "ensure_directory",
    "atomic_write_bytes",
    "LogCodec",
]
