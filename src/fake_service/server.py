import json
import threading
import time
from collections import deque
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self

from src.utils.crypto import parse_authorization, verify_signature


def _error_body(error_type: str, message: str) -> bytes:
    return json.dumps({"__type": error_type, "message": message}).encode()


class _ServiceHandler(BaseHTTPRequestHandler):
    """HTTP request handler impersonating a JSON cloud service."""

    def _handle(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length)

        server_config = self.server.config  # type: ignore[attr-defined]

        # Simulate slow response
        if server_config["response_delay"] > 0:
            time.sleep(server_config["response_delay"])

        with server_config["lock"]:
            server_config["received_requests"].append({
                "method": self.command,
                "path": self.path,
                "headers": dict(self.headers),
                "body": body,
            })

        # Signature verification
        secret = server_config["signature_secret"]
        if secret:
            authorization = self.headers.get("authorization", "")
            if not authorization:
                self._reply(
                    403,
                    _error_body("MissingAuthenticationTokenException", "Missing Authentication Token"),
                )
                return
            parts = parse_authorization(authorization)
            valid = verify_signature(
                self.command,
                self.path,
                parts["service"],
                self.headers.get("x-amz-date", ""),
                body,
                secret,
                parts.get("Signature", ""),
            )
            if not valid:
                self._reply(
                    403,
                    _error_body(
                        "com.amazon.coral.service#InvalidSignatureException",
                        "The request signature we calculated does not match the signature you provided.",
                    ),
                )
                return

        with server_config["lock"]:
            if server_config["scripted"]:
                code, payload, headers = server_config["scripted"].popleft()
            else:
                code, payload, headers = server_config["default"]

        self._reply(code, payload, headers)

    def _reply(self, code: int, payload: bytes, headers: dict | None = None):
        # 1xx, 204 and 304 carry no body
        if code < 200 or code in (204, 304):
            payload = b""
        self.send_response(code)
        self.send_header("Content-Type", "application/x-amz-json-1.0")
        if code >= 200 and code not in (204, 304):
            self.send_header("Content-Length", str(len(payload)))
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        if payload and self.command != "HEAD":
            self.wfile.write(payload)

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_DELETE = _handle

    def log_message(self, format, *args):
        """Suppress default request logging."""
        pass


def _encode(body) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode()
    return json.dumps(body).encode()


class FakeServiceServer:
    """Configurable HTTP server that simulates a JSON cloud service endpoint."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0, secret: str | None = None):
        self._host = host
        self._port = port
        self._config = {
            "default": (200, b"{}", {}),
            "scripted": deque(),
            "response_delay": 0,
            "signature_secret": secret,
            "received_requests": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response(self, code: int, body=b"{}", headers: dict | None = None) -> Self:
        """Response returned once the scripted queue is empty."""
        with self._config["lock"]:
            self._config["default"] = (code, _encode(body), headers or {})
        return self

    def queue_response(self, code: int, body=b"{}", headers: dict | None = None) -> Self:
        """Response returned by the next request, before the default one."""
        with self._config["lock"]:
            self._config["scripted"].append((code, _encode(body), headers or {}))
        return self

    def queue_service_error(self, code: int, error_type: str, message: str, times: int = 1) -> Self:
        for _ in range(times):
            self.queue_response(code, _error_body(error_type, message))
        return self

    def set_response_delay(self, seconds: float) -> Self:
        self._config["response_delay"] = seconds
        return self

    def enable_signature_verification(self, secret: str) -> Self:
        self._config["signature_secret"] = secret
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _ServiceHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}/"

    @property
    def port(self) -> int:
        return self._port

    def get_received_requests(self) -> list[dict]:
        with self._config["lock"]:
            return list(self._config["received_requests"])

    def get_request_count(self) -> int:
        with self._config["lock"]:
            return len(self._config["received_requests"])

    def clear_requests(self) -> None:
        with self._config["lock"]:
            self._config["received_requests"].clear()
            self._config["scripted"].clear()
