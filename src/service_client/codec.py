import json
from typing import Any

from src.models.errors import DecodeError


class JsonCodec:
    """JSON codec capability backed by the standard library."""

    def encode(self, value: Any) -> str:
        return json.dumps(value, default=str)

    def decode(self, data: bytes | str) -> Any:
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(str(e)) from e
        try:
            return json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            raise DecodeError(str(e)) from e
