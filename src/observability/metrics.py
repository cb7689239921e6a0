import threading
import time

from src.observability.telemetry import TelemetrySink


class MetricsCollector:
    """Collects per-attempt success/failure counts over a rolling window."""

    def __init__(self, window_seconds: float = 300):
        self._window_seconds = window_seconds
        self._successes: list[tuple[float, str | None]] = []  # (timestamp, operation)
        self._failures: list[tuple[float, str | None]] = []
        self._lock = threading.Lock()

    def attach(self, telemetry: TelemetrySink, event_prefix: tuple = ("service_client", "request")) -> str:
        """Subscribe to the stop events of ``event_prefix``; returns the handler id."""
        handler_id = f"metrics-{id(self)}"
        telemetry.attach(handler_id, tuple(event_prefix) + ("stop",), self.handle_event)
        return handler_id

    def handle_event(self, event: tuple, measurements: dict, metadata: dict) -> None:
        if metadata.get("result") == "ok":
            self.record_success(metadata.get("operation"))
        else:
            self.record_failure(metadata.get("operation"))

    def record_success(self, operation: str | None = None) -> None:
        with self._lock:
            self._successes.append((time.monotonic(), operation))

    def record_failure(self, operation: str | None = None) -> None:
        with self._lock:
            self._failures.append((time.monotonic(), operation))

    def _prune(self, data: list[tuple[float, str | None]], now: float, operation: str | None = None) -> list:
        cutoff = now - self._window_seconds
        return [e for e in data if e[0] >= cutoff and (operation is None or e[1] == operation)]

    def failure_rate(self, operation: str | None = None) -> float:
        """Failure rate in the current rolling window (0.0 to 1.0)."""
        with self._lock:
            now = time.monotonic()
            successes = self._prune(self._successes, now, operation)
            failures = self._prune(self._failures, now, operation)
            total = len(successes) + len(failures)
            if total == 0:
                return 0.0
            return len(failures) / total

    def total_in_window(self, operation: str | None = None) -> int:
        with self._lock:
            now = time.monotonic()
            successes = self._prune(self._successes, now, operation)
            failures = self._prune(self._failures, now, operation)
            return len(successes) + len(failures)

    def failure_count_in_window(self, operation: str | None = None) -> int:
        with self._lock:
            now = time.monotonic()
            return len(self._prune(self._failures, now, operation))

    def success_count_in_window(self, operation: str | None = None) -> int:
        with self._lock:
            now = time.monotonic()
            return len(self._prune(self._successes, now, operation))

    def operations_in_window(self) -> list[str]:
        """Named operations with at least one attempt in the window, sorted."""
        with self._lock:
            now = time.monotonic()
            entries = self._prune(self._successes, now) + self._prune(self._failures, now)
            return sorted({op for _, op in entries if op is not None})

    def reset(self) -> None:
        with self._lock:
            self._successes.clear()
            self._failures.clear()
