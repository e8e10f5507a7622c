"""
Decorators and utilities for MDB_PROVIDER.

These are internal helper functions that don't affect the public API.
They give every provider operation the same completion discipline, logging
and metrics.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from ..constants import METRIC_PREFIX
from ..exceptions import NotAffectedError
from ..observability.logging import clear_provider_context, log_operation, set_provider_context
from ..observability.metrics import record_operation
from .tick import tick

logger = logging.getLogger(__name__)

T = TypeVar("T")


def provider_operation(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T | None]]]:
    """
    Decorator for provider coroutines.

    The decorated coroutine gains a keyword-only ``callback`` argument:

    - without it, the result is returned and errors are raised;
    - with it, ``callback(error, result)`` is invoked exactly once through
      ``tick`` and the coroutine returns None. Any ``Exception`` the
      operation raises (driver errors, client-side validation errors such as
      a malformed filter, provider errors) is delivered as ``error``, with
      ``result`` None. ``BaseException``s such as ``asyncio.CancelledError``
      still propagate.

    While the operation runs, the provider context (collection and
    operation) is set for logging. Every call is timed, recorded as
    ``provider.<operation>`` in the metrics collector (tagged with the
    collection) and logged.

    Args:
        operation: Operation name used for logging and metrics

    Returns:
        Decorator for async provider methods
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T | None]]:
        @wraps(func)
        async def wrapper(self: Any, *args: Any, callback: Any = None, **kwargs: Any) -> T | None:
            done = tick(callback)
            collection_name = getattr(self, "collection_name", None)
            token = set_provider_context(collection_name=collection_name, operation=operation)
            start_time = time.time()
            success = False
            try:
                result = await func(self, *args, **kwargs)
                success = True
            except NotAffectedError as e:
                logger.debug(f"{self.log_prefix} {operation}: {e.message}")
                if done is None:
                    raise
                done(e, None)
                return None
            except Exception as e:
                logger.error(f"{self.log_prefix} {operation} failed: {type(e).__name__}: {e}")
                if done is None:
                    raise
                done(e, None)
                return None
            finally:
                duration_ms = (time.time() - start_time) * 1000
                record_operation(
                    f"{METRIC_PREFIX}.{operation}",
                    duration_ms,
                    success,
                    collection=collection_name,
                )
                log_operation(
                    logger,
                    f"{METRIC_PREFIX}.{operation}",
                    level=logging.DEBUG,
                    success=success,
                    duration_ms=duration_ms,
                )
                clear_provider_context(token)

            if done is None:
                return result
            done(None, result)
            return None

        return wrapper

    return decorator
