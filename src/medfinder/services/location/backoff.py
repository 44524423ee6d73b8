"""Retry bookkeeping for failed device position requests."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class BackoffPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    attempt: int = 0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def record_failure(self) -> None:
        self.attempt += 1

    def reset(self) -> None:
        self.attempt = 0

    def next_delay(self) -> float:
        """Seconds to wait before the next attempt; 0 before any failure."""
        if self.attempt <= 0:
            return 0.0
        return min(self.max_delay, self.base_delay * (2 ** (self.attempt - 1)))
