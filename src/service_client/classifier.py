from typing import Any, Callable

from src.models.errors import DecodeError
from src.models.outcome import (
    Failure,
    HttpError,
    RawResponse,
    Retry,
    ServiceError,
    Success,
    Terminal,
    UnhandledServiceError,
)

FallbackClassifier = Callable[[UnhandledServiceError], "Retry | Terminal | None"]


class ErrorClassifier:
    """Turns a normalized HTTP response into a Retry or Terminal decision."""

    # Capacity and rate-limit back-pressure from the remote service
    RETRYABLE_ERROR_TYPES = frozenset({
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "TooManyRequestsException",
    })

    # Local DynamoDB (1.15+) capitalizes "Message"
    MESSAGE_KEYS = ("message", "Message")

    def __init__(self, codec, fallback: FallbackClassifier | None = None):
        self.codec = codec
        self.fallback = fallback

    def classify(self, response: RawResponse) -> Retry | Terminal:
        status = response.status_code

        if 200 <= status <= 299 or status == 304:
            return Terminal(Success(status, response.body, list(response.headers)))
        if status == 301:
            return Terminal(Failure(HttpError(301, "redirected")))
        if 400 <= status <= 499:
            return self.client_error(response)
        if status >= 500:
            return Retry(HttpError(status, response.body), "server")
        return Terminal(Failure(HttpError(status, response.body)))

    def client_error(self, response: RawResponse) -> Retry | Terminal:
        status = response.status_code
        decoded = self.decode_error(response.body)
        if decoded is None:
            return Terminal(Failure(HttpError(status, response.body)))

        error_type, message, payload = decoded
        segments = error_type.split("#")
        if len(segments) > 2:
            return Terminal(Failure(HttpError(status, response.body)))

        return self.handle_service_error(segments[-1], message, payload, status)

    def decode_error(self, body: Any) -> tuple[str, str, dict] | None:
        """Return ``(type, message, payload)`` for a structured error body, else None."""
        try:
            payload = self.codec.decode(body)
        except DecodeError:
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("__type"), str):
            return None
        for key in self.MESSAGE_KEYS:
            if key in payload:
                return payload["__type"], payload[key], payload
        return None

    def handle_service_error(
        self, error_type: str, message: str, payload: dict, status: int
    ) -> Retry | Terminal:
        if error_type in self.RETRYABLE_ERROR_TYPES:
            return Retry(ServiceError(error_type, message), "client")

        if "expectedSequenceToken" in payload:
            return Terminal(Failure(
                ServiceError(error_type, message, payload["expectedSequenceToken"])
            ))

        unhandled = UnhandledServiceError(error_type, message, payload, status)
        if self.fallback is not None:
            decision = self.fallback(unhandled)
            if decision is not None:
                return decision
        return self.default_service_error(unhandled)

    @staticmethod
    def default_service_error(unhandled: UnhandledServiceError) -> Terminal:
        return Terminal(Failure(ServiceError(unhandled.error_type, unhandled.message)))
