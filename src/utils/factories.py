import json

from src.models.outcome import RawResponse
from src.models.request import RequestConfig, RetryPolicy
from src.service_client.codec import JsonCodec


class ServiceErrorFactory:
    """Factory for structured service error bodies."""

    @staticmethod
    def body(
        error_type: str = "ThrottlingException",
        message: str = "Rate exceeded",
        namespace: str | None = "com.amazonaws.dynamodb.v20120810",
        message_key: str = "message",
        **extra,
    ) -> str:
        discriminator = f"{namespace}#{error_type}" if namespace else error_type
        payload = {"__type": discriminator, message_key: message}
        payload.update(extra)
        return json.dumps(payload)

    @staticmethod
    def response(status_code: int = 400, **overrides) -> RawResponse:
        headers = overrides.pop("headers", [("Content-Type", "application/x-amz-json-1.0")])
        return RawResponse(status_code, ServiceErrorFactory.body(**overrides), headers)


class ResponseFactory:
    """Factory for RawResponse instances with sensible defaults."""

    @staticmethod
    def create(**overrides) -> RawResponse:
        defaults = {
            "status_code": 200,
            "body": b'{"TableNames": []}',
            "headers": [
                ("Content-Type", "application/x-amz-json-1.0"),
                ("x-amzn-RequestId", "req-0001"),
            ],
        }
        defaults.update(overrides)
        return RawResponse(**defaults)


class ConfigFactory:
    """Factory for RequestConfig instances; backoff is zero unless overridden."""

    @staticmethod
    def create(http_client, **overrides) -> RequestConfig:
        retry_overrides = overrides.pop("retries", {})
        if isinstance(retry_overrides, RetryPolicy):
            retries = retry_overrides
        else:
            retry_defaults = {"max_attempts": 3, "base_backoff_ms": 0, "max_backoff_ms": 0}
            retry_defaults.update(retry_overrides)
            retries = RetryPolicy(**retry_defaults)

        defaults = {
            "json_codec": JsonCodec(),
            "http_client": http_client,
            "retries": retries,
        }
        defaults.update(overrides)
        return RequestConfig(**defaults)


def operation_headers(operation: str = "DynamoDB_20120810.ListTables") -> list[tuple[str, str]]:
    return [
        ("content-type", "application/x-amz-json-1.0"),
        ("x-amz-target", operation),
    ]
