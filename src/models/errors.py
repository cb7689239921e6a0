class ServiceClientError(Exception):
    """Base class for errors raised by request capabilities."""


class SigningError(ServiceClientError):
    """Request headers could not be signed (credentials or configuration)."""


class TransportError(ServiceClientError):
    """The transport produced no HTTP response at all."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DecodeError(ServiceClientError):
    """A response body could not be decoded by the codec."""
