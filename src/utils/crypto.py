import hashlib
import hmac
from urllib.parse import urlsplit


def _body_digest(body: bytes | str) -> str:
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.sha256(body).hexdigest()


def canonical_request(method: str, url: str, service: str, timestamp: str, body: bytes | str) -> str:
    """Build the string that gets signed.

    Accepts a full URL or a bare path, so client and server produce the same
    canonical form.
    """
    parts = urlsplit(url)
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"
    return "\n".join([method.upper(), target, service, timestamp, _body_digest(body)])


def generate_signature(
    method: str, url: str, service: str, timestamp: str, body: bytes | str, secret: str
) -> str:
    """Generate HMAC-SHA256 signature for a service request."""
    message = canonical_request(method, url, service, timestamp, body)
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    method: str,
    url: str,
    service: str,
    timestamp: str,
    body: bytes | str,
    secret: str,
    signature: str,
) -> bool:
    """Verify HMAC-SHA256 signature against a service request."""
    expected = generate_signature(method, url, service, timestamp, body, secret)
    return hmac.compare_digest(expected, signature)


def parse_authorization(value: str) -> dict[str, str]:
    """Split an ``authorization`` header into algorithm, credential and signature."""
    algorithm, _, rest = value.partition(" ")
    parts = {"algorithm": algorithm}
    for item in rest.split(","):
        key, sep, val = item.strip().partition("=")
        if sep:
            parts[key] = val
    access_key_id, _, service = parts.get("Credential", "").partition("/")
    parts["access_key_id"] = access_key_id
    parts["service"] = service
    return parts
