from typing import Callable, Optional, Type, Tuple, Any
import asyncio
from dataclasses import dataclass, field

from reworkit.common.config.constants import MAX_SUBMIT_ATTEMPTS, SUBMIT_RETRY_DELAY_SECONDS
from reworkit.common.exceptions.base_exceptions import RetryableException
from reworkit.common.config.logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class RetryConfig:
    max_attempts: int = MAX_SUBMIT_ATTEMPTS
    delay: float = SUBMIT_RETRY_DELAY_SECONDS
    retryable_exceptions: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (RetryableException, ConnectionError, TimeoutError)
    )


def should_retry(
    exception: Exception,
    attempt: int,
    config: RetryConfig,
) -> bool:
    if attempt + 1 >= config.max_attempts:
        return False

    return isinstance(exception, config.retryable_exceptions)


class RetryContext:
    def __init__(self, config: RetryConfig):
        self.config = config
        self.attempt = 0
        self.last_exception: Optional[Exception] = None

    def should_continue(self) -> bool:
        return self.attempt < self.config.max_attempts

    def record_failure(self, exception: Exception) -> bool:
        self.last_exception = exception
        return should_retry(exception, self.attempt, self.config)

    def increment(self) -> None:
        self.attempt += 1


async def async_with_retry(
    func: Callable[..., Any],
    config: Optional[RetryConfig] = None,
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Await ``func`` until it succeeds or ``config.max_attempts`` calls have failed.

    ``config.delay`` is slept only between attempts, never after the last one.
    Exceptions outside ``config.retryable_exceptions`` propagate immediately.
    """
    if config is None:
        config = RetryConfig()

    context = RetryContext(config)

    while context.should_continue():
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"({context.attempt + 1}/{config.max_attempts}) "
                f"{getattr(func, '__name__', 'call')} failed: {e}"
            )

            if not context.record_failure(e):
                raise

            await asyncio.sleep(config.delay)
            context.increment()

    if context.last_exception:
        raise context.last_exception
    raise RuntimeError("Unexpected retry loop exit")
