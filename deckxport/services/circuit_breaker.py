"""
Consecutive-failure circuit breaker.

Trips after ``threshold`` failures in a row and stays open for the rest of
its life; a fresh breaker is created per import.
"""

from deckxport.config import MAX_CONSECUTIVE_TAGGER_ERRORS


class CircuitBreaker:
    """Counts consecutive failures of one dependency."""

    def __init__(self, threshold: int = MAX_CONSECUTIVE_TAGGER_ERRORS) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {threshold}")
        self.threshold = threshold
        self.consecutive_failures = 0
        self._tripped = False

    @property
    def is_open(self) -> bool:
        """True once the breaker has tripped; no further calls should be made."""
        return self._tripped

    def record_success(self) -> None:
        self.consecutive_failures = 0

    def record_failure(self) -> bool:
        """
        Count a failure.

        Returns:
            True if this failure tripped (or the breaker was already open)
        """
        self.consecutive_failures += 1
        if self.consecutive_failures >= self.threshold:
            self._tripped = True
        return self._tripped
