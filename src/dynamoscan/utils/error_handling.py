"""
Error handling utilities for Dynamoscan.

This module provides decorators for consistent error translation and retry.
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar, cast

from ..exceptions import DynamoScanError

T = TypeVar('T')

ErrorMapping = Dict[Type[BaseException], Callable[[BaseException], DynamoScanError]]


def _translate(error: BaseException, error_mapping: Optional[ErrorMapping]) -> Optional[DynamoScanError]:
    """Return the mapped exception for ``error``, most specific type first."""
    if not error_mapping:
        return None
    for exc_type in type(error).__mro__:
        factory = error_mapping.get(exc_type)
        if factory is not None:
            return factory(error)
    return None


def async_handle_errors(
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    default: Any = None,
    log_level: int = logging.ERROR,
    error_mapping: Optional[ErrorMapping] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator to standardize error handling of coroutines.

    Exceptions that are already ``DynamoScanError`` instances pass through
    untouched. Others are logged, then translated through ``error_mapping``
    when a mapping matches, replaced by ``default`` when one is given, or
    re-raised.

    Args:
        exceptions: Exception types to catch
        default: Default value to return on error
        log_level: Logging level for errors
        error_mapping: Exception type to factory producing a Dynamoscan error

    Returns:
        Decorated async function with error handling
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except DynamoScanError:
                raise
            except exceptions as e:
                logger = logging.getLogger(func.__module__)
                logger.log(
                    log_level,
                    "Error in %s: %s",
                    func.__qualname__,
                    e,
                    exc_info=log_level <= logging.DEBUG,
                )
                mapped = _translate(e, error_mapping)
                if mapped is not None:
                    raise mapped from e
                if default is not None:
                    return cast(T, default)
                raise
        return wrapper
    return decorator


def async_retry_on_failure(
    max_retries: int = 3,
    initial_delay: float = 0.5,
    max_delay: float = 10.0,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator to retry a coroutine on failure with exponential backoff.

    ``max_retries`` may also be supplied per call through a ``max_retries``
    attribute on the bound instance, which takes precedence.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Factor by which the delay increases after each retry
        exceptions: Exception types to catch and retry on

    Returns:
        Decorated async function with retry logic
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            retries = getattr(args[0], "max_retries", max_retries) if args else max_retries
            delay = initial_delay
            last_exception: Optional[Exception] = None

            for attempt in range(retries + 1):
                try:
                    if attempt > 0:
                        logger = logging.getLogger(func.__module__)
                        logger.warning(
                            "Retry %d/%d for %s after %.1fs",
                            attempt, retries, func.__qualname__, delay
                        )
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt == retries:
                        break
                    await asyncio.sleep(min(delay, max_delay))
                    delay *= backoff_factor

            assert last_exception is not None
            raise last_exception
        return wrapper
    return decorator
