"""Exponential backoff for retrying connections."""

from __future__ import annotations


class Backoff:
    """Iterator of retry delays in seconds that grow by a factor up to a cap.

    The first two delays are ``min_secs``. Each later delay is the previous one
    times ``factor``, capped at ``max_secs``. With ``retries`` set to zero the
    iterator never ends.
    """

    def __init__(
        self,
        retries: int = 10,
        min_secs: int = 1,
        max_secs: int = 20,
        factor: int = 2,
    ) -> None:
        self.retries = retries
        self.min_secs = min_secs
        self.max_secs = max_secs
        self.factor = factor
        self._counter = 0
        self._value_secs = min_secs

    def __repr__(self) -> str:
        return (
            f"Backoff(retries={self.retries}, min_secs={self.min_secs}, "
            f"max_secs={self.max_secs}, factor={self.factor}, "
            f"counter={self._counter})"
        )

    def reset(self) -> None:
        """Start counting attempts again from the minimum delay."""
        self._counter = 0
        self._value_secs = self.min_secs

    def iteration_count(self) -> int:
        """Number of delays handed out since creation or the last reset."""
        return self._counter

    def __iter__(self) -> Backoff:
        return self

    def __next__(self) -> int:
        if self.retries > 0 and self._counter >= self.retries:
            raise StopIteration
        value = self._value_secs
        self._counter += 1
        if self._counter == 1:
            self._value_secs = self.min_secs
        else:
            self._value_secs = min(self._value_secs * self.factor, self.max_secs)
        return value