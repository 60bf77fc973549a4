"""Error boundary for independently rendered dashboard panels.

A panel that fails to render is retried a bounded number of times and then
replaced by a fallback, so one broken panel never takes the whole screen down.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from taskflow.utils.logger import get_logger

logger = get_logger("error_boundary")

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3


class ErrorBoundary:
    """Bounded-retry wrapper around a render callable.

    Attributes:
        name: Panel name used in log messages
        max_retries: Retries allowed before giving up
        retry_count: Retries used so far
        error: Last render failure, None after a success or reset
    """

    def __init__(self, name: str, max_retries: int = DEFAULT_MAX_RETRIES):
        self.name = name
        self.max_retries = max_retries
        self.retry_count = 0
        self.error: Exception | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def can_retry(self) -> bool:
        return self.retry_count < self.max_retries

    def run(self, render: Callable[[], T], fallback: Any = None) -> T | Any:
        """Render, retrying on failure until the retry budget is spent.

        Args:
            render: Zero-argument callable producing the panel
            fallback: Value returned once retries are exhausted; a callable
                is called with the last error

        Returns:
            The render result, or the fallback
        """
        while True:
            try:
                result = render()
            except Exception as e:
                self.error = e
                logger.warning(
                    "panel %s failed to render (retry %d/%d): %s",
                    self.name,
                    self.retry_count,
                    self.max_retries,
                    e,
                    exc_info=True,
                )
                if self.retry():
                    continue
                return fallback(e) if callable(fallback) else fallback
            self.error = None
            return result

    def retry(self) -> bool:
        """Spend one retry. Returns False when none are left."""
        if not self.can_retry:
            return False
        self.retry_count += 1
        return True

    def reset(self) -> None:
        self.retry_count = 0
        self.error = None
