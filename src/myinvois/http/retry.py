"""Retry policy with exponential backoff and jitter"""

import random
from dataclasses import dataclass
from typing import Callable, Optional

from myinvois.exceptions import ApiError, NetworkError


RETRYABLE_STATUS_CODES = frozenset({429})


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration for transient failures

    Attributes:
        max_attempts: Total number of attempts, including the first one
        base_delay: Base delay in milliseconds
        max_delay: Upper bound for the exponential part in milliseconds
        max_jitter: Upper bound for the random jitter in milliseconds
    """
    max_attempts: int = 3
    base_delay: int = 1000
    max_delay: int = 10000
    max_jitter: int = 1000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0 or self.max_jitter < 0:
            raise ValueError("delays must not be negative")

    def backoff(self, attempt: int) -> int:
        """Exponential part of the delay for a 0-based attempt, in milliseconds"""
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    def compute_delay(
        self, attempt: int, rand: Optional[Callable[[], float]] = None
    ) -> float:
        """
        Calculate the delay before the next attempt

        delay = min(base * 2^attempt, max_delay) + jitter, with jitter drawn
        uniformly from [0, min(max_jitter, delay)].

        Args:
            attempt: Current attempt number (0-based)
            rand: Source of uniform floats in [0, 1), defaults to random.random

        Returns:
            Delay in seconds
        """
        delay_ms = self.backoff(attempt)
        jitter_ms = (rand or random.random)() * min(self.max_jitter, delay_ms)
        return (delay_ms + jitter_ms) / 1000.0

    @staticmethod
    def is_retryable(error: BaseException) -> bool:
        """Network-level failures, 429 and 5xx responses are retryable"""
        if isinstance(error, NetworkError):
            return error.retryable
        if isinstance(error, ApiError) and error.status_code is not None:
            return error.status_code in RETRYABLE_STATUS_CODES or error.status_code >= 500
        return False
