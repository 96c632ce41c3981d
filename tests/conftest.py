import pytest
from starlette.testclient import TestClient

from paylink.config import Settings
from paylink.credentials import load
from paylink.main import create_app
from tests.helpers.provider import ProviderStub, RecordingPaymentHandler
from tests.step_defs.common_steps import ALLOWED_ORIGIN, KEY_ID, KEY_SECRET, WEBHOOK_SECRET


@pytest.fixture(scope="function")
def settings():
    """Settings built from explicit values only; no environment or .env lookup."""
    return Settings(
        _env_file=None,
        razor_key_id=KEY_ID,
        razor_key_secret=KEY_SECRET,
        razor_webhook_secret=WEBHOOK_SECRET,
        allowed_origin=ALLOWED_ORIGIN,
        razorpay_api_base="https://api.razorpay.test/v1",
    )


@pytest.fixture(scope="function")
def credentials(settings):
    return load(settings)


@pytest.fixture(scope="function")
def provider_stub():
    return ProviderStub()


@pytest.fixture(scope="function")
def payment_handler():
    return RecordingPaymentHandler()


@pytest.fixture(scope="function")
def app(settings, credentials, provider_stub, payment_handler):
    """App wired to the stub provider and a recording payment hook."""
    return create_app(
        settings,
        credentials,
        transport=provider_stub.transport,
        payment_handler=payment_handler,
    )


@pytest.fixture(scope="function")
def client(app):
    """HTTP test client."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
