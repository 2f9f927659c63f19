"""Decorator utilities for cross-cutting concerns."""
import functools
import logging
import time
from typing import Any, Callable, TypeVar, cast

# Setup logging
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])

def log_upload_time(func: F) -> F:
    """Decorator to log how long an entity upload method took and how it ended.

    Args:
        func: A method of a ``FieldAccessor`` returning a success flag

    Returns:
        Decorated method that logs duration and outcome
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        start_time = time.time()
        bucket = self.bucket_name()
        try:
            result = func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"{func.__name__} on '{bucket}' failed after {duration:.2f}s: {str(e)}")
            raise
        duration = time.time() - start_time
        outcome = "completed" if result else "rejected"
        logger.info(f"{func.__name__} on '{bucket}' {outcome} in {duration:.2f}s")
        return result
    return cast(F, wrapper)
