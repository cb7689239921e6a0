import time
import uuid
from datetime import datetime, timezone

from src.models.errors import SigningError, TransportError
from src.models.outcome import (
    Attempt,
    AttemptRecord,
    Failure,
    SigningFailure,
    Success,
    Terminal,
    TransportFailure,
)
from src.models.request import RequestConfig
from src.observability.telemetry import TelemetrySink
from src.service_client.classifier import ErrorClassifier
from src.service_client.instrumentation import AttemptInstrumentation, extract_operation
from src.service_client.logger import RequestLogger
from src.service_client.retry import RetryManager
from src.service_client.signer import Signer
from src.utils.url import sanitize


class RequestEngine:
    """Executes signed service requests with classification and retries.

    Attempts run one at a time on the caller's thread. The only blocking
    point besides the transport itself is the backoff sleep, so the worst-case
    wall clock for one call is the sum of ``ceiling - 1`` backoff delays plus
    one transport timeout per attempt. Callers with their own deadline should
    size ``RetryPolicy`` and the transport timeout accordingly.
    """

    def __init__(
        self,
        signer: Signer,
        retry_manager: RetryManager | None = None,
        logger: RequestLogger | None = None,
        telemetry: TelemetrySink | None = None,
        fallback_classifier=None,
    ):
        self.signer = signer
        self.retry_manager = retry_manager or RetryManager()
        self.logger = logger or RequestLogger()
        self.instrumentation = AttemptInstrumentation(telemetry)
        self.fallback_classifier = fallback_classifier

    @property
    def telemetry(self) -> TelemetrySink:
        return self.instrumentation.telemetry

    def request(self, method: str, url: str, data, headers, config: RequestConfig, service: str):
        """Encode ``data`` into a request body and execute the request."""
        if data is None or (isinstance(data, list) and not data):
            body = "{}"
        elif isinstance(data, (str, bytes)):
            body = data
        else:
            body = config.json_codec.encode(data)
        return self.execute(method, url, service, config, list(headers), body)

    def execute(
        self, method: str, url: str, service: str, config: RequestConfig, headers, body
    ) -> Success | Failure:
        classifier = ErrorClassifier(config.json_codec, self.fallback_classifier)
        safe_url = sanitize(url, service)
        state = Attempt(1)

        while isinstance(state, Attempt):
            attempt = state.number

            try:
                full_headers = self.signer.headers(method, url, service, config, headers, body)
            except SigningError as e:
                return Failure(SigningFailure(str(e)))

            if config.debug_requests:
                self.logger.debug_request(method, safe_url, full_headers, body, attempt)

            start = time.monotonic()
            try:
                response = self.instrumentation.call(
                    config, method, safe_url, body, full_headers, attempt, service
                )
            except TransportError as e:
                elapsed_ms = (time.monotonic() - start) * 1000
                self.logger.transport_error(e.reason, safe_url, attempt)
                state = self.retry_manager.next_attempt(
                    attempt, TransportFailure(e.reason), "other", config.retries
                )
                self._record(
                    full_headers, safe_url, attempt, None, elapsed_ms,
                    self._decision(state), e.reason,
                )
                continue
            elapsed_ms = (time.monotonic() - start) * 1000

            decision = classifier.classify(response)

            if isinstance(decision, Terminal):
                result = decision.result
                if isinstance(result, Failure) and response.status_code == 301:
                    self.logger.redirected(safe_url)
                self._record(
                    full_headers, safe_url, attempt, response.status_code, elapsed_ms,
                    "success" if result.ok else "terminal",
                    None if result.ok else repr(result.reason),
                )
                return result

            state = self.retry_manager.next_attempt(
                attempt, decision.reason, decision.error_class, config.retries
            )
            self._record(
                full_headers, safe_url, attempt, response.status_code, elapsed_ms,
                self._decision(state), repr(decision.reason),
            )

        return Failure(state.reason)

    @staticmethod
    def _decision(state) -> str:
        return "retry" if isinstance(state, Attempt) else "terminal"

    def _record(self, headers, url, attempt, status_code, elapsed_ms, decision, error):
        self.logger.log(AttemptRecord(
            attempt_id=f"att_{uuid.uuid4().hex[:16]}",
            operation=extract_operation(headers),
            url=url,
            attempt=attempt,
            status_code=status_code,
            timestamp=datetime.now(timezone.utc),
            response_time_ms=elapsed_ms,
            decision=decision,
            error=error,
        ))
