from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 10
    base_backoff_ms: int = 10
    max_backoff_ms: int = 10_000
    client_error_max_attempts: int | None = None  # 4xx ceiling, falls back to max_attempts

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.client_error_max_attempts is not None and self.client_error_max_attempts < 1:
            raise ValueError(
                f"client_error_max_attempts must be >= 1, got {self.client_error_max_attempts}"
            )
        if self.base_backoff_ms < 0 or self.max_backoff_ms < 0:
            raise ValueError("backoff values must be non-negative")

    def ceiling(self, error_class: str) -> int:
        if error_class == "client" and self.client_error_max_attempts is not None:
            return self.client_error_max_attempts
        return self.max_attempts


@dataclass(frozen=True)
class RequestConfig:
    json_codec: Any
    http_client: Any
    retries: RetryPolicy = field(default_factory=RetryPolicy)
    debug_requests: bool = False
    telemetry_event: tuple[str, ...] = ("service_client", "request")
    telemetry_options: dict = field(default_factory=dict)
    http_opts: dict = field(default_factory=dict)
