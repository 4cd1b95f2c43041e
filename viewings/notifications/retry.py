"""Retry policy for outbound email delivery.

Transient transport failures are retried with exponential backoff;
anything left over is raised as NotificationError so callers only ever
handle one failure type.
"""

import functools
import logging
import smtplib
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from viewings.errors import NotificationError

logger = structlog.get_logger()
_std_logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
RETRY_MULTIPLIER = 1.0
RETRY_MAX_WAIT = 10.0

# Exceptions that are retriable (transient failures)
RETRIABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
)


def send_with_retry(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Decorator to retry a delivery coroutine with exponential backoff.

    Args:
        func: Async function performing one delivery attempt

    Returns:
        Wrapped function raising NotificationError on final failure
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        @retry(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=RETRY_MULTIPLIER, min=0, max=RETRY_MAX_WAIT),
            retry=retry_if_exception_type(RETRIABLE_EXCEPTIONS),
            before_sleep=before_sleep_log(_std_logger, logging.INFO),
            reraise=True,
        )
        async def inner():
            return await func(*args, **kwargs)

        try:
            return await inner()
        except (RetryError, *RETRIABLE_EXCEPTIONS) as e:
            logger.error(
                "delivery retries exhausted",
                function=func.__name__,
                attempts=MAX_ATTEMPTS,
                error=str(e),
            )
            msg = f"Retry exhausted after {MAX_ATTEMPTS} attempts: {e}"
            raise NotificationError(msg) from e
        except NotificationError:
            raise
        except Exception as e:
            logger.error(
                "non-retriable delivery error",
                function=func.__name__,
                error=str(e),
            )
            raise NotificationError(str(e)) from e

    return wrapper
