import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from paylink.config import Settings
from paylink.credentials import CredentialContext
from paylink.errors import (
    MalformedUpstreamResponseError,
    ProviderRejectedError,
    ProviderUnreachableError,
)
from paylink.schemas import LinkPayload, ProviderLinkResponse

logger = logging.getLogger(__name__)

PAYMENT_LINKS_PATH = "/payment_links"


def build_http_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """HTTP client for the provider API with a bounded timeout on every phase."""
    return httpx.AsyncClient(
        base_url=settings.razorpay_api_base,
        timeout=httpx.Timeout(settings.provider_timeout_seconds),
        transport=transport,
    )


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


class RazorpayClient:
    """Thin client for the payment-link creation endpoint. No retries."""

    def __init__(self, http: httpx.AsyncClient, credentials: CredentialContext) -> None:
        self._http = http
        self._credentials = credentials

    async def create_payment_link(self, payload: LinkPayload) -> str:
        """
        Create a hosted payment link and return its URL.

        Raises:
            ProviderUnreachableError: Transport failure or timeout.
            ProviderRejectedError: Non-2xx status; carries the provider's error body.
            MalformedUpstreamResponseError: 2xx without `short_url` or `link_url`.
        """
        try:
            response = await self._http.post(
                PAYMENT_LINKS_PATH,
                json=payload.model_dump(),
                headers={"Authorization": self._credentials.auth_header_value()},
            )
        except httpx.TransportError as exc:
            logger.warning("Payment provider unreachable: %s", type(exc).__name__)
            raise ProviderUnreachableError(str(exc)) from exc

        data = _decode_body(response)
        if not response.is_success:
            logger.error("Razorpay create-link error (HTTP %d): %s", response.status_code, data)
            raise ProviderRejectedError(response.status_code, data)

        if not isinstance(data, dict):
            raise MalformedUpstreamResponseError("Provider response is not a JSON object.")
        try:
            url = ProviderLinkResponse.model_validate(data).resolved_url()
        except ValidationError as exc:
            raise MalformedUpstreamResponseError(str(exc)) from exc
        if not url:
            raise MalformedUpstreamResponseError("Provider response has no short_url or link_url.")
        return url
