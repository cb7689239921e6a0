from .crypto import generate_signature, parse_authorization, verify_signature
from .url import sanitize

__all__ = [
    "generate_signature", "parse_authorization", "verify_signature",
    "sanitize",
]
