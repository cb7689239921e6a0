import random

import pytest

from src.models.outcome import Attempt, Failed, HttpError
from src.models.request import RetryPolicy
from src.service_client.retry import RetryManager


REASON = HttpError(500, "boom")


class TestNextAttempt:
    """Tests for RetryManager.next_attempt()."""

    @pytest.mark.unit
    def test_returns_next_attempt_under_ceiling(self, retry_manager):
        policy = RetryPolicy(max_attempts=3)
        assert retry_manager.next_attempt(1, REASON, "server", policy) == Attempt(2)
        assert retry_manager.next_attempt(2, REASON, "server", policy) == Attempt(3)

    @pytest.mark.unit
    def test_returns_failed_at_ceiling(self, retry_manager, sleeps):
        policy = RetryPolicy(max_attempts=3)
        assert retry_manager.next_attempt(3, REASON, "server", policy) == Failed(REASON)
        assert sleeps.delays == []

    @pytest.mark.unit
    def test_single_attempt_ceiling_never_retries(self, retry_manager):
        policy = RetryPolicy(max_attempts=1)
        assert retry_manager.next_attempt(1, REASON, "other", policy) == Failed(REASON)

    @pytest.mark.unit
    def test_client_ceiling_used_for_client_errors(self, retry_manager):
        policy = RetryPolicy(max_attempts=10, client_error_max_attempts=2)
        assert retry_manager.next_attempt(2, REASON, "client", policy) == Failed(REASON)
        assert retry_manager.next_attempt(2, REASON, "server", policy) == Attempt(3)

    @pytest.mark.unit
    def test_client_errors_fall_back_to_general_ceiling(self, retry_manager):
        policy = RetryPolicy(max_attempts=2)
        assert retry_manager.next_attempt(1, REASON, "client", policy) == Attempt(2)
        assert retry_manager.next_attempt(2, REASON, "client", policy) == Failed(REASON)

    @pytest.mark.unit
    def test_sleeps_once_per_retry(self, retry_manager, sleeps):
        policy = RetryPolicy(max_attempts=5, base_backoff_ms=10, max_backoff_ms=1000)
        retry_manager.next_attempt(1, REASON, "server", policy)
        retry_manager.next_attempt(2, REASON, "server", policy)
        assert len(sleeps.delays) == 2


class TestEnvelope:
    """Tests for the exponential envelope and jitter."""

    @pytest.mark.unit
    def test_envelope_doubles_per_attempt(self, retry_manager):
        policy = RetryPolicy(base_backoff_ms=10, max_backoff_ms=10_000)
        assert retry_manager.envelope(1, policy) == 20
        assert retry_manager.envelope(2, policy) == 40
        assert retry_manager.envelope(5, policy) == 320

    @pytest.mark.unit
    def test_envelope_capped_at_max_backoff(self, retry_manager):
        policy = RetryPolicy(base_backoff_ms=10, max_backoff_ms=100)
        assert retry_manager.envelope(4, policy) == 100
        assert retry_manager.envelope(30, policy) == 100

    @pytest.mark.unit
    @pytest.mark.parametrize("attempt", [1, 2, 3, 6, 12])
    def test_realized_delay_never_exceeds_envelope(self, attempt):
        rm = RetryManager(sleep=lambda _: None, rng=random.Random(1234))
        policy = RetryPolicy(base_backoff_ms=10, max_backoff_ms=2_000)
        envelope = rm.envelope(attempt, policy)
        samples = [rm.next_delay(attempt, policy) for _ in range(2_000)]
        assert all(1 <= d <= envelope for d in samples)

    @pytest.mark.unit
    def test_delay_spreads_across_envelope(self):
        rm = RetryManager(sleep=lambda _: None, rng=random.Random(42))
        policy = RetryPolicy(base_backoff_ms=50, max_backoff_ms=10_000)
        samples = {rm.next_delay(1, policy) for _ in range(2_000)}
        assert min(samples) < 20
        assert max(samples) > 80

    @pytest.mark.unit
    def test_zero_envelope_does_not_sleep(self, retry_manager, sleeps):
        policy = RetryPolicy(max_attempts=3, base_backoff_ms=0, max_backoff_ms=0)
        assert retry_manager.backoff(1, policy) == 0
        assert sleeps.delays == []

    @pytest.mark.unit
    def test_backoff_sleeps_in_seconds(self, sleeps):
        rm = RetryManager(sleep=sleeps, rng=random.Random(7))
        policy = RetryPolicy(base_backoff_ms=500, max_backoff_ms=500)
        delay_ms = rm.backoff(3, policy)
        assert sleeps.delays == [delay_ms / 1000]
        assert 0 < sleeps.delays[0] <= 0.5


class TestRetryPolicy:
    """Tests for RetryPolicy defaults and validation."""

    @pytest.mark.unit
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 10
        assert policy.base_backoff_ms == 10
        assert policy.max_backoff_ms == 10_000
        assert policy.client_error_max_attempts is None

    @pytest.mark.unit
    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"client_error_max_attempts": 0},
        {"base_backoff_ms": -1},
        {"max_backoff_ms": -5},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    @pytest.mark.unit
    def test_ceiling_selection(self):
        policy = RetryPolicy(max_attempts=5, client_error_max_attempts=2)
        assert policy.ceiling("client") == 2
        assert policy.ceiling("server") == 5
        assert policy.ceiling("other") == 5
