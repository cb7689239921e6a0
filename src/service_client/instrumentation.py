from collections.abc import Mapping
from typing import Any

from src.models.errors import TransportError
from src.models.outcome import RawResponse
from src.models.request import RequestConfig
from src.observability.telemetry import TelemetrySink

OPERATION_HEADER = "x-amz-target"


def extract_operation(headers) -> str | None:
    """Value of the first operation marker header, if any."""
    for name, value in headers:
        if name.lower() == OPERATION_HEADER:
            return value
    return None


def normalize_response(raw: Any) -> RawResponse:
    """Coerce a transport response into a RawResponse.

    Some clients call the status field ``status`` rather than ``status_code``;
    both mappings and response objects (e.g. ``requests.Response``) are accepted.
    """
    if isinstance(raw, RawResponse):
        return raw

    if isinstance(raw, Mapping):
        status = raw["status_code"] if "status_code" in raw else raw["status"]
        body = raw.get("body", b"")
        headers = raw.get("headers", [])
    else:
        status = getattr(raw, "status_code", None)
        if status is None:
            status = raw.status
        body = getattr(raw, "content", None)
        if body is None:
            body = getattr(raw, "body", b"")
        headers = getattr(raw, "headers", [])

    if isinstance(headers, Mapping):
        headers = list(headers.items())
    return RawResponse(int(status), body, list(headers))


def is_success(status: int) -> bool:
    return 200 <= status <= 299 or status == 304


def extract_error(result: Any) -> Any:
    """Innermost body or reason of a failed attempt, for telemetry."""
    if isinstance(result, TransportError):
        return result.reason
    if isinstance(result, RawResponse):
        return result.body
    return result


class AttemptInstrumentation:
    """Wraps a single transport call in a telemetry span."""

    def __init__(self, telemetry: TelemetrySink | None = None):
        self.telemetry = telemetry or TelemetrySink()

    def call(
        self,
        config: RequestConfig,
        method: str,
        url: str,
        body,
        headers,
        attempt: int,
        service: str,
    ) -> RawResponse:
        """Perform the transport call; raises TransportError when it fails."""
        metadata = {
            "options": config.telemetry_options,
            "attempt": attempt,
            "service": service,
            "request_body": body,
            "operation": extract_operation(headers),
        }

        def run():
            try:
                result = normalize_response(
                    config.http_client.request(method, url, body, headers, config.http_opts)
                )
            except TransportError as e:
                result = e

            if isinstance(result, RawResponse) and is_success(result.status_code):
                stop = {"result": "ok", "response_body": result.body}
            else:
                stop = {"result": "error", "error": extract_error(result)}
            return result, {**metadata, **stop}

        result = self.telemetry.span(config.telemetry_event, metadata, run)
        if isinstance(result, TransportError):
            raise result
        return result
