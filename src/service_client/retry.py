import random
import time
from typing import Any, Callable

from src.models.outcome import Attempt, Failed
from src.models.request import RetryPolicy


class RetryManager:
    """Decides whether another attempt is allowed and sleeps between attempts.

    Delays use full jitter: a uniformly random whole number of milliseconds in
    ``[1, min(base_backoff_ms * 2**attempt, max_backoff_ms)]``.
    """

    def __init__(
        self,
        sleep: Callable[[float], None] | None = None,
        rng: random.Random | None = None,
    ):
        self._sleep = sleep or time.sleep
        self._rng = rng or random.Random()

    def next_attempt(
        self, attempt: int, reason: Any, error_class: str, policy: RetryPolicy
    ) -> Attempt | Failed:
        """Return the state that follows a retryable failure of ``attempt``."""
        if attempt >= policy.ceiling(error_class):
            return Failed(reason)
        self.backoff(attempt, policy)
        return Attempt(attempt + 1)

    def envelope(self, attempt: int, policy: RetryPolicy) -> int:
        """Upper bound of the backoff delay in milliseconds."""
        return int(min(policy.base_backoff_ms * 2**attempt, policy.max_backoff_ms))

    def next_delay(self, attempt: int, policy: RetryPolicy) -> int:
        """Draw the jittered delay in milliseconds for ``attempt``."""
        ceiling = self.envelope(attempt, policy)
        if ceiling < 1:
            return 0
        return self._rng.randint(1, ceiling)

    def backoff(self, attempt: int, policy: RetryPolicy) -> int:
        delay_ms = self.next_delay(attempt, policy)
        if delay_ms > 0:
            self._sleep(delay_ms / 1000)
        return delay_ms
