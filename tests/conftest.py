import pytest

from src.fake_service.server import FakeServiceServer
from src.observability.alerting import AlertManager
from src.observability.metrics import MetricsCollector
from src.observability.telemetry import TelemetrySink
from src.service_client.codec import JsonCodec
from src.service_client.engine import RequestEngine
from src.service_client.logger import RequestLogger
from src.service_client.retry import RetryManager
from src.service_client.signer import HmacRequestSigner
from src.service_client.transport import RequestsTransport
from src.utils.factories import ConfigFactory, ResponseFactory, ServiceErrorFactory


ACCESS_KEY_ID = "AKIDEXAMPLE"
SECRET_ACCESS_KEY = "test-secret-access-key"


class StubTransport:
    """Transport returning scripted responses; the last one repeats forever."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, body, headers, options=None):
        self.calls.append({
            "method": method, "url": url, "body": body,
            "headers": list(headers), "options": options,
        })
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def secret_access_key():
    return SECRET_ACCESS_KEY


@pytest.fixture
def signer():
    return HmacRequestSigner(ACCESS_KEY_ID, SECRET_ACCESS_KEY)


@pytest.fixture
def codec():
    return JsonCodec()


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def retry_manager(sleeps):
    return RetryManager(sleep=sleeps)


@pytest.fixture
def logger():
    return RequestLogger()


@pytest.fixture
def telemetry():
    return TelemetrySink()


@pytest.fixture
def engine(signer, retry_manager, logger, telemetry):
    return RequestEngine(
        signer=signer,
        retry_manager=retry_manager,
        logger=logger,
        telemetry=telemetry,
    )


@pytest.fixture
def transport():
    return RequestsTransport(timeout_seconds=5)


@pytest.fixture
def stub_transport():
    return StubTransport


@pytest.fixture
def fake_service():
    server = FakeServiceServer(secret=SECRET_ACCESS_KEY)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def fake_service_no_auth():
    """Fake service without signature verification."""
    server = FakeServiceServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def metrics():
    return MetricsCollector(window_seconds=300)


@pytest.fixture
def alert_manager(metrics):
    return AlertManager(metrics=metrics, threshold=0.10)


@pytest.fixture
def config_factory():
    return ConfigFactory


@pytest.fixture
def response_factory():
    return ResponseFactory


@pytest.fixture
def error_factory():
    return ServiceErrorFactory
