"""
Timing utilities for the chart gallery.
"""

import functools
import logging
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Record how long each decorated call takes.

    Examples:
        >>> monitor = PerformanceMonitor()
        >>> @monitor.time_this
        >>> def render_histogram():
        >>>     ...
        >>> monitor.timings['render_histogram']
    """

    def __init__(self):
        self.timings: Dict[str, float] = {}

    def time_this(self, func: Callable) -> Callable:
        """
        Decorator to measure function execution time.

        Args:
            func: Function to be timed

        Returns:
            Wrapped function with timing
        """
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - start_time
                self.timings[func.__name__] = elapsed
                logger.info(f"{func.__name__} took {elapsed:.4f} seconds")
        return wrapper

    def total(self) -> float:
        return sum(self.timings.values())
