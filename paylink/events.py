import json
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

logger = logging.getLogger(__name__)

PAYMENT_LINK_PAID = "payment_link.paid"
PREVIEW_CHARS = 1000


@dataclass(frozen=True)
class PaymentLinkPaid:
    """A payment link was paid. Entities are empty dicts when the provider omits them."""

    name: ClassVar[str] = PAYMENT_LINK_PAID
    payment: dict = field(default_factory=dict)
    payment_link: dict = field(default_factory=dict)
    payload: Any = None


@dataclass(frozen=True)
class UnhandledEvent:
    """Any other event name, including a missing one. Acknowledged, never acted on."""

    name: str = ""


PaymentEvent = PaymentLinkPaid | UnhandledEvent


def _entity(payload: dict, key: str) -> dict:
    section = payload.get(key)
    if not isinstance(section, dict):
        return {}
    entity = section.get("entity")
    return entity if isinstance(entity, dict) else {}


def parse_event(body: Any) -> PaymentEvent:
    """Map a verified webhook body to a PaymentEvent without raising on odd shapes."""
    if not isinstance(body, dict):
        return UnhandledEvent()

    name = body.get("event")
    if not isinstance(name, str):
        return UnhandledEvent()
    if name != PAYMENT_LINK_PAID:
        return UnhandledEvent(name=name)

    payload = body.get("payload")
    if not isinstance(payload, dict):
        return PaymentLinkPaid(payload=body)
    return PaymentLinkPaid(
        payment=_entity(payload, "payment"),
        payment_link=_entity(payload, "payment_link"),
        payload=payload,
    )


class PaymentConfirmedHandler(Protocol):
    """Downstream collaborator for confirmed payments (order store, notifications)."""

    def on_payment_confirmed(self, event: PaymentLinkPaid) -> None: ...


class LoggingPaymentHandler:
    """Default hook: records the paid link and does nothing else."""

    def on_payment_confirmed(self, event: PaymentLinkPaid) -> None:
        preview = json.dumps(event.payload, default=str)[:PREVIEW_CHARS]
        logger.info(
            "Payment link %s paid by payment %s: %s",
            event.payment_link.get("id"),
            event.payment.get("id"),
            preview,
        )
