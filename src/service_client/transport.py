import requests

from src.models.errors import TransportError


class RequestsTransport:
    """HTTP client capability on top of ``requests``.

    Returns a plain mapping with ``status_code``, ``body`` and ``headers``;
    raises TransportError when no HTTP response was received.
    """

    def __init__(self, timeout_seconds: float = 30, session: requests.Session | None = None):
        self.timeout_seconds = timeout_seconds
        self._session = session

    def request(self, method: str, url: str, body, headers, options=None) -> dict:
        options = dict(options or {})
        timeout = options.pop("timeout", self.timeout_seconds)
        send = self._session.request if self._session is not None else requests.request

        try:
            resp = send(
                method.upper(),
                url,
                data=body,
                headers=dict(headers),
                timeout=timeout,
                allow_redirects=False,
                **options,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError("timeout") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError("connection_error") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        return {
            "status_code": resp.status_code,
            "body": resp.content,
            "headers": list(resp.headers.items()),
        }
