from .classifier import ErrorClassifier
from .codec import JsonCodec
from .engine import RequestEngine
from .instrumentation import AttemptInstrumentation
from .logger import RequestLogger
from .retry import RetryManager
from .signer import HmacRequestSigner
from .transport import RequestsTransport

__all__ = [
    "ErrorClassifier",
    "JsonCodec",
    "RequestEngine",
    "AttemptInstrumentation",
    "RequestLogger",
    "RetryManager",
    "HmacRequestSigner",
    "RequestsTransport",
]
