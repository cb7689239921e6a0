from .errors import DecodeError, ServiceClientError, SigningError, TransportError
from .outcome import (
    Attempt,
    AttemptRecord,
    Failed,
    Failure,
    HttpError,
    RawResponse,
    Retry,
    ServiceError,
    SigningFailure,
    Success,
    Terminal,
    TransportFailure,
    UnhandledServiceError,
)
from .request import RequestConfig, RetryPolicy

__all__ = [
    "DecodeError", "ServiceClientError", "SigningError", "TransportError",
    "Attempt", "AttemptRecord", "Failed", "Failure", "HttpError", "RawResponse",
    "Retry", "ServiceError", "SigningFailure", "Success", "Terminal",
    "TransportFailure", "UnhandledServiceError",
    "RequestConfig", "RetryPolicy",
]
