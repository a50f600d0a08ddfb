from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def log_errors(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Log a failed API call at error level before letting the exception through.

    Each line reads ``[KasuwaApiClient.request] ApiError: HTTP 401: Unauthorized``,
    enough to tell which call failed when the workflow later shows only the
    message to the shopper.

    Usage::

        @log_errors
        async def request(self, method: str, path: str, *, payload=None) -> Any: ...
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            logger.error(f"[{func.__qualname__}] {type(exc).__name__}: {exc}")
            raise

    return wrapper
