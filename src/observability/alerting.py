from src.observability.metrics import MetricsCollector


class AlertManager:
    """Raises failure-rate alerts per operation over a MetricsCollector.

    Each operation (the ``x-amz-target`` carried by telemetry stop events, or
    None for the aggregate) has its own fire-once latch that re-arms when its
    rate falls back to or below the threshold. Operations with fewer than
    ``min_attempts`` attempts in the window are not judged.
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        threshold: float = 0.10,
        callback=None,
        min_attempts: int = 1,
    ):
        self.metrics = metrics
        self.threshold = threshold
        self.callback = callback
        self.min_attempts = min_attempts
        self._firing: set[str | None] = set()
        self._alerts: list[dict] = []

    def check(self, operation: str | None = None) -> dict | None:
        """Evaluate one operation (None for all traffic); returns a new alert or None."""
        total = self.metrics.total_in_window(operation)
        if total == 0 or total < self.min_attempts:
            return None

        rate = self.metrics.failure_rate(operation)
        if rate <= self.threshold:
            self._firing.discard(operation)
            return None
        if operation in self._firing:
            return None

        failures = self.metrics.failure_count_in_window(operation)
        scope = operation or "all operations"
        alert = {
            "type": "request_failure_rate",
            "operation": operation,
            "failure_rate": rate,
            "threshold": self.threshold,
            "total_attempts": total,
            "failed_attempts": failures,
            "message": (
                f"{scope}: failure rate {rate:.1%} over {self.threshold:.1%} "
                f"({failures}/{total} attempts failed)"
            ),
        }
        self._firing.add(operation)
        self._alerts.append(alert)
        if self.callback:
            self.callback(alert)
        return alert

    def check_operations(self) -> list[dict]:
        """Evaluate every operation seen in the window; returns the new alerts."""
        alerts = []
        for operation in self.metrics.operations_in_window():
            alert = self.check(operation)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def firing(self) -> set[str | None]:
        return set(self._firing)

    def get_alerts(self) -> list[dict]:
        return list(self._alerts)

    def reset(self) -> None:
        self._firing.clear()
        self._alerts.clear()
