"""
Deferred re-raise for completion callbacks.

Motor resolves driver futures from inside its own callback machinery. A
completion callback that raises while the driver is still unwinding can leave
that machinery half-finished, so callbacks handed to the driver (or invoked on
its behalf) are wrapped with ``tick``: the callback still runs synchronously
and first, but an exception it raises is re-raised on the next event loop
iteration instead of propagating into the caller's stack.
"""

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


def _raise(exc: BaseException) -> None:
    raise exc


def defer_raise(exc: Exception) -> None:
    """
    Re-raise ``exc`` on the next iteration of the running event loop.

    The loop's exception handler reports it (``loop.set_exception_handler``
    can observe it). Without a running loop there is no later turn to defer
    to, so the exception is raised immediately.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        raise exc from None

    logger.error(
        f"Completion callback raised {type(exc).__name__}: {exc}. "
        f"Re-raising on the next event loop iteration."
    )
    loop.call_soon(_raise, exc)


def tick(callback: Callable[..., Any] | None) -> Callable[..., Any] | None:
    """
    Wrap ``callback`` so that exceptions it raises are deferred.

    Args:
        callback: Completion callback; anything that is not callable is ignored

    Returns:
        A wrapper with the same signature, or None if ``callback`` is not callable

    Example:
        ```python
        done = tick(callback)
        if done:
            done(None, result)
        ```
    """
    if not callable(callback):
        return None

    @functools.wraps(callback)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return callback(*args, **kwargs)
        except Exception as exc:
            defer_raise(exc)
            return None

    return wrapper
