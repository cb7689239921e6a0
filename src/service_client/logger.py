import logging
import threading

from src.models.outcome import AttemptRecord

log = logging.getLogger(__name__)


class RequestLogger:
    """Diagnostic sink for the request engine.

    Writes human-readable lines through ``logging`` and keeps a thread-safe
    history of attempt records.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._log = logger or log
        self._attempts: list[AttemptRecord] = []
        self._lock = threading.Lock()

    def debug_request(self, method: str, url: str, headers, body, attempt: int) -> None:
        self._log.debug(
            "Request %s URL: %r HEADERS: %r BODY: %r ATTEMPT: %d",
            method.upper(), url, headers, body, attempt,
        )

    def redirected(self, url: str) -> None:
        self._log.warning("Received redirect for %r, did you specify the correct region?", url)

    def transport_error(self, reason: str, url: str, attempt: int) -> None:
        self._log.warning("HTTP ERROR: %r for URL: %r ATTEMPT: %d", reason, url, attempt)

    def log(self, record: AttemptRecord) -> None:
        with self._lock:
            self._attempts.append(record)

    def get_attempts(self, operation: str | None = None) -> list[AttemptRecord]:
        with self._lock:
            if operation is None:
                return list(self._attempts)
            return [a for a in self._attempts if a.operation == operation]

    def get_failed_attempts(self) -> list[AttemptRecord]:
        with self._lock:
            return [a for a in self._attempts if a.decision != "success"]

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
