"""
Error types and error handling utilities for distviz.

The estimator functions raise ``InvalidInput`` or ``InvalidConfiguration``;
``ErrorHandler`` records failures raised while rendering the chart gallery.
"""

import logging
import traceback
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterator, List, Optional


class DistributionError(ValueError):
    """Base class for all errors raised by the distribution estimator."""


class InvalidInput(DistributionError):
    """The sample set (or a query against it) cannot be used, e.g. it is empty."""


class InvalidConfiguration(DistributionError):
    """A caller-supplied setting is invalid: bin edges, bandwidth, kernel or policy."""


class ErrorHandler:
    """
    Centralized error handling with logging and custom responses.

    Examples:
        >>> handler = ErrorHandler()
        >>> with handler.catch_errors("render histogram"):
        >>>     viz.histogram(samples)
        >>> handler.error_count
        0
    """

    def __init__(self, log_file: Optional[str] = None, logger_name: str = "distviz.errors"):
        self.logger = self._setup_logger(logger_name, log_file)
        self.errors: List[Dict[str, Any]] = []

    def _setup_logger(self, logger_name: str, log_file: Optional[str]) -> logging.Logger:
        logger = logging.getLogger(logger_name)
        if log_file and not any(
            isinstance(h, logging.FileHandler) and h.baseFilename.endswith(log_file)
            for h in logger.handlers
        ):
            handler = logging.FileHandler(log_file, encoding="utf-8")
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def handle_error(self, error: Exception, context: str) -> Dict[str, Any]:
        """
        Process and log an error with context.

        Args:
            error: The caught exception
            context: Description of where/when error occurred

        Returns:
            The recorded error details
        """
        error_details = {
            'type': type(error).__name__,
            'message': str(error),
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
            'context': context
        }
        self.errors.append(error_details)
        self.logger.error(f"Error in {context}: {error_details['type']}: {error_details['message']}")
        self.logger.debug(error_details['traceback'])
        return error_details

    @contextmanager
    def catch_errors(self, context: str, reraise: bool = False) -> Iterator[None]:
        """
        Log any exception raised inside the block under ``context``.

        Args:
            context: Description of the guarded operation
            reraise: Propagate the exception after logging it
        """
        try:
            yield
        except Exception as e:
            self.handle_error(e, context)
            if reraise:
                raise

    def wrap(self, context: str) -> Callable:
        """Decorator form of ``catch_errors``; the wrapped call returns None on failure."""
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs):
                with self.catch_errors(context):
                    return func(*args, **kwargs)
                return None
            return wrapper
        return decorator
