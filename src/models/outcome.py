from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    body: bytes | str
    headers: list[tuple[str, str]] = field(default_factory=list)


# Failure reasons

@dataclass(frozen=True)
class HttpError:
    status: int
    body: Any


@dataclass(frozen=True)
class ServiceError:
    error_type: str
    message: str
    expected_sequence_token: str | None = None


@dataclass(frozen=True)
class TransportFailure:
    reason: str


@dataclass(frozen=True)
class SigningFailure:
    message: str


# Results

@dataclass(frozen=True)
class Success:
    status: int
    body: bytes | str
    headers: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    reason: HttpError | ServiceError | TransportFailure | SigningFailure

    @property
    def ok(self) -> bool:
        return False


# Attempt state threaded through the retry loop

@dataclass(frozen=True)
class Attempt:
    number: int


@dataclass(frozen=True)
class Failed:
    reason: Any


# Classifier decisions

@dataclass(frozen=True)
class Retry:
    reason: Any
    error_class: str  # "client", "server" or "other"


@dataclass(frozen=True)
class Terminal:
    result: Success | Failure


@dataclass(frozen=True)
class UnhandledServiceError:
    """A decoded service error that matched no known rule."""

    error_type: str
    message: str
    payload: dict
    status: int


@dataclass
class AttemptRecord:
    attempt_id: str
    operation: str | None
    url: str
    attempt: int
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    decision: str  # "success", "retry" or "terminal"
    error: str | None = None
