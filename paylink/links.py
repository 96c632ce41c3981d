import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from pydantic import ValidationError

from paylink.errors import InvalidAmountError
from paylink.provider import RazorpayClient
from paylink.schemas import CreateLinkRequest, CreateLinkResponse, LinkPayload

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: int | float) -> int:
    """
    Convert rupees to paise, rounding half away from zero.

    The amount is taken at its shortest decimal representation before scaling,
    so 10.005 becomes 1001 rather than the 1000 that binary float rounding
    would give.
    """
    value = Decimal(str(amount))
    with localcontext() as ctx:
        # Exact product: never fewer digits than the input plus the scale factor.
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + 3)
        scaled = value * MINOR_UNITS_PER_MAJOR
        return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def build_link_payload(request: CreateLinkRequest, description: str) -> LinkPayload:
    amount = to_minor_units(request.amount_in_inr)
    if amount <= 0:
        # e.g. 0.001 rupees rounds to zero paise
        raise InvalidAmountError(f"amount_in_inr {request.amount_in_inr!r} is below one paisa")
    return LinkPayload(amount=amount, description=description)


class LinkCreator:
    def __init__(self, client: RazorpayClient, description: str) -> None:
        self._client = client
        self._description = description

    async def create(self, body: Any) -> CreateLinkResponse:
        """Validate a decoded request body, create the link, return its URL.

        Validation happens before any provider call.
        """
        try:
            request = CreateLinkRequest.model_validate(body)
        except ValidationError as exc:
            raise InvalidAmountError(str(exc)) from exc

        payload = build_link_payload(request, self._description)
        link_url = await self._client.create_payment_link(payload)
        logger.info("Created payment link for %d paise", payload.amount)
        return CreateLinkResponse(link_url=link_url)
