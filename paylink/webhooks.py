import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any

from paylink.credentials import CredentialContext
from paylink.errors import (
    BadRequestError,
    InvalidSignatureError,
    PaylinkError,
    ServerMisconfiguredError,
)
from paylink.events import PaymentConfirmedHandler, PaymentEvent, PaymentLinkPaid, parse_event
from paylink.signature import verify_signature

logger = logging.getLogger(__name__)


class WebhookState(str, Enum):
    RECEIVED = "received"
    SIGNATURE_CHECKED = "signature_checked"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


TRANSITIONS: dict[WebhookState, set[WebhookState]] = {
    WebhookState.RECEIVED: {WebhookState.SIGNATURE_CHECKED, WebhookState.REJECTED},
    WebhookState.SIGNATURE_CHECKED: {WebhookState.ACCEPTED, WebhookState.REJECTED},
}

# No transition leaves these.
TERMINAL_STATES: set[WebhookState] = {WebhookState.ACCEPTED, WebhookState.REJECTED}


class InvalidTransitionError(Exception):
    """Transition not allowed from the current webhook state."""


def advance(current: WebhookState, target: WebhookState) -> WebhookState:
    if current in TERMINAL_STATES:
        raise InvalidTransitionError(f"Webhook already in terminal state '{current.value}'.")
    if target not in TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(f"Cannot move webhook from '{current.value}' to '{target.value}'.")
    return target


@dataclass(eq=False)
class WebhookEnvelope:
    """
    One webhook delivery as received.

    `parsed_body` is always decoded from `raw_body`, so the structure handed to
    business logic and the bytes the signature covers come from the same request.
    """

    raw_body: bytes
    signature: str | None = None

    @cached_property
    def parsed_body(self) -> Any:
        return json.loads(self.raw_body)


@dataclass
class WebhookOutcome:
    state: WebhookState
    status_code: int
    message: str
    error_kind: str | None = None
    event: PaymentEvent | None = field(default=None, repr=False)


class WebhookVerifier:
    def __init__(self, credentials: CredentialContext, handler: PaymentConfirmedHandler) -> None:
        self._credentials = credentials
        self._handler = handler

    def process(self, envelope: WebhookEnvelope) -> WebhookOutcome:
        """Verify one delivery and, only if it verifies, interpret it as an event."""
        state = WebhookState.RECEIVED
        try:
            self._check_signature(envelope)
            state = advance(state, WebhookState.SIGNATURE_CHECKED)
            body = self._decode(envelope)
        except PaylinkError as exc:
            advance(state, WebhookState.REJECTED)
            return WebhookOutcome(
                state=WebhookState.REJECTED,
                status_code=exc.status_code,
                message=str(exc),
                error_kind=exc.kind,
            )

        event = parse_event(body)
        logger.info("Verified webhook event: %s", event.name or "<none>")
        if isinstance(event, PaymentLinkPaid):
            try:
                self._handler.on_payment_confirmed(event)
            except Exception:  # noqa: BLE001
                # The acknowledgement covers receipt and verification only.
                logger.exception("Payment hook failed for verified event %s", event.name)

        return WebhookOutcome(
            state=advance(state, WebhookState.ACCEPTED),
            status_code=200,
            message="ok",
            event=event,
        )

    def _check_signature(self, envelope: WebhookEnvelope) -> None:
        # Read on every delivery, never cached at startup.
        secret = self._credentials.webhook_secret
        if not secret:
            logger.warning("RAZOR_WEBHOOK_SECRET not configured")
            raise ServerMisconfiguredError("webhook secret not configured")

        if not envelope.signature or not envelope.raw_body:
            logger.warning("Missing signature or raw body")
            raise BadRequestError("bad request")

        try:
            verify_signature(secret=secret, signature=envelope.signature, body=envelope.raw_body)
        except ValueError:
            logger.warning("Invalid webhook signature")
            raise InvalidSignatureError("invalid signature")

    @staticmethod
    def _decode(envelope: WebhookEnvelope) -> dict | list:
        try:
            body = envelope.parsed_body
        except (ValueError, RecursionError):
            logger.warning("Verified webhook body is not valid JSON")
            raise BadRequestError("bad request")
        # Objects and arrays are accepted; bare scalars are not a JSON document body.
        if not isinstance(body, (dict, list)):
            logger.warning("Verified webhook body is not a JSON object or array")
            raise BadRequestError("bad request")
        return body
