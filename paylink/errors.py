from typing import Any


class PaylinkError(Exception):
    """Base class for errors mapped to an HTTP response at the route boundary."""

    kind: str = "internal_error"
    status_code: int = 500


class InvalidAmountError(PaylinkError):
    """Requested amount is missing, not a number, non-positive or non-finite."""

    kind = "invalid_amount"
    status_code = 400


class ProviderUnreachableError(PaylinkError):
    """The payment provider could not be reached (connect/read failure or timeout)."""

    kind = "provider_unreachable"
    status_code = 503


class ProviderRejectedError(PaylinkError):
    """The payment provider answered with a non-success status."""

    kind = "provider_rejected"
    status_code = 502

    def __init__(self, provider_status: int, details: Any) -> None:
        super().__init__(f"Provider returned HTTP {provider_status}.")
        self.provider_status = provider_status
        self.details = details


class MalformedUpstreamResponseError(PaylinkError):
    """The provider reported success but the response carries no usable link URL."""

    kind = "malformed_upstream_response"
    status_code = 500


class ServerMisconfiguredError(PaylinkError):
    """A required server-side secret is not configured."""

    kind = "server_misconfigured"
    status_code = 500


class BadRequestError(PaylinkError):
    """Webhook delivery is missing its signature header or body."""

    kind = "bad_request"
    status_code = 400


class InvalidSignatureError(PaylinkError):
    """Webhook signature does not match the body."""

    kind = "invalid_signature"
    status_code = 400
