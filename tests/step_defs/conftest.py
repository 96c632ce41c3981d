"""Shared BDD step definitions for all feature files.

Step definitions live here (not in common_steps.py) because pytest-bdd
registers step fixtures in the caller module's locals. Only conftest.py
modules are auto-discovered by pytest, so shared steps MUST be defined here
for pytest-bdd to find them across all test files in this directory.

All parametric steps use parsers.parse(); plain strings do exact matching.
"""
import pytest
from pytest_bdd import given, parsers, then, when
from starlette.testclient import TestClient

from paylink.credentials import CredentialContext
from paylink.main import create_app
from tests.fixtures.payloads import make_webhook_payload
from tests.step_defs.common_steps import (
    CREATE_LINK_URL,
    KEY_ID,
    KEY_SECRET,
    _post_raw,
    _post_webhook,
)


# ── Given ──────────────────────────────────────────────────────────────────────

@given("the webhook secret is not configured", target_fixture="client")
def client_without_webhook_secret(settings, provider_stub, payment_handler):
    credentials = CredentialContext(key_id=KEY_ID, key_secret=KEY_SECRET, webhook_secret=None)
    application = create_app(
        settings,
        credentials,
        transport=provider_stub.transport,
        payment_handler=payment_handler,
    )
    return TestClient(application, raise_server_exceptions=False)


# ── When ───────────────────────────────────────────────────────────────────────

@when(parsers.parse('I send a "{event}" webhook with a valid signature'))
def send_valid_webhook(event, client, context):
    payload = make_webhook_payload(event=event)
    context["response"] = _post_webhook(client, payload)


@when(parsers.parse('I send a webhook with body "{body}" and no signature header'))
def send_unsigned_webhook(body, client, context):
    context["response"] = _post_raw(
        client, body.encode(), {"Content-Type": "application/json"},
    )


@when(parsers.parse("I request a payment link with body {body}"))
def request_link_with_body(body, client, context):
    context["response"] = client.post(
        CREATE_LINK_URL,
        content=body.encode(),
        headers={"Content-Type": "application/json"},
    )


# ── Then ───────────────────────────────────────────────────────────────────────

@then(parsers.parse("the response status should be {code:d}"))
def check_status_code(code, context):
    assert context["response"].status_code == code, (
        f"Expected {code}, got {context['response'].status_code}: "
        f"{context['response'].text}"
    )


@then(parsers.parse('the response text should be "{text}"'))
def check_response_text(text, context):
    assert context["response"].text == text, f"Got body {context['response'].text!r}"


@then(parsers.parse('the response JSON "{key}" should be "{value}"'))
def check_json_field(key, value, context):
    body = context["response"].json()
    assert body.get(key) == value, f"Expected {key}={value!r} in {body}"


@then(parsers.parse("all responses should have status {code:d}"))
def all_responses_status(code, context):
    assert context.get("responses"), "No responses recorded"
    for resp in context["responses"]:
        assert not isinstance(resp, Exception), f"Request raised {resp!r}"
        assert resp.status_code == code, (
            f"Expected {code}, got {resp.status_code}: {resp.text}"
        )


@then(parsers.parse("the provider should have received {n:d} requests"))
@then(parsers.parse("the provider should have received {n:d} request"))
def check_provider_calls(n, provider_stub):
    assert len(provider_stub.requests) == n, (
        f"Expected {n} provider calls, got {len(provider_stub.requests)}"
    )


@then("the payment hook should not have been called")
def check_hook_not_called(payment_handler):
    assert payment_handler.events == [], f"Hook received {payment_handler.events!r}"


@then(parsers.parse('the response should allow origin "{origin}"'))
def check_allow_origin(origin, context):
    header = context["response"].headers.get("access-control-allow-origin")
    assert header == origin, f"Access-Control-Allow-Origin is {header!r}"


@pytest.fixture
def context():
    return {}
