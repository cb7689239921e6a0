from datetime import datetime, timezone
from typing import Callable, Protocol

from src.models.errors import SigningError
from src.utils.crypto import generate_signature

Headers = list[tuple[str, str]]


class Signer(Protocol):
    def headers(
        self, method: str, url: str, service: str, config, headers: Headers, body: bytes | str
    ) -> Headers: ...


class HmacRequestSigner:
    """Signs service requests with HMAC-SHA256.

    Adds an ``x-amz-date`` timestamp and an ``authorization`` header on top of
    the caller's headers. The timestamp is part of the signature, which is why
    the engine re-signs on every attempt.
    """

    ALGORITHM = "HMAC-SHA256"

    def __init__(
        self,
        access_key_id: str,
        secret_access_key: str,
        clock: Callable[[], datetime] | None = None,
    ):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def headers(
        self, method: str, url: str, service: str, config, headers: Headers, body: bytes | str
    ) -> Headers:
        if not self.access_key_id or not self.secret_access_key:
            raise SigningError("missing credentials: access_key_id and secret_access_key are required")

        timestamp = self._clock().strftime("%Y%m%dT%H%M%SZ")
        signature = generate_signature(
            method, url, service, timestamp, body, self.secret_access_key
        )
        authorization = (
            f"{self.ALGORITHM} Credential={self.access_key_id}/{service}, Signature={signature}"
        )
        signed = [(k, v) for k, v in headers if k.lower() not in ("x-amz-date", "authorization")]
        signed.append(("x-amz-date", timestamp))
        signed.append(("authorization", authorization))
        return signed

