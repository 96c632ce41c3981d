import json
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from paylink.config import Settings
from paylink.credentials import CredentialContext
from paylink.errors import (
    InvalidAmountError,
    MalformedUpstreamResponseError,
    ProviderRejectedError,
    ProviderUnreachableError,
)
from paylink.events import LoggingPaymentHandler, PaymentConfirmedHandler
from paylink.links import LinkCreator
from paylink.provider import RazorpayClient, build_http_client
from paylink.signature import SIGNATURE_HEADER
from paylink.webhooks import WebhookEnvelope, WebhookVerifier

logger = logging.getLogger(__name__)

HEALTH_TEXT = "Payment backend running"
AMOUNT_REQUIRED = "amount_in_inr required (number)"
PAYLOAD_TOO_LARGE = "payload too large"
CORS_ALLOW_HEADERS = f"Content-Type, {SIGNATURE_HEADER.lower()}"
CORS_ALLOW_METHODS = "GET, POST, OPTIONS"


def _apply_cors_headers(response: Response, allowed_origin: str) -> Response:
    response.headers["Access-Control-Allow-Origin"] = allowed_origin
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    return response


def _decode_json(raw: bytes):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


def create_app(
    settings: Settings,
    credentials: CredentialContext,
    transport: httpx.AsyncBaseTransport | None = None,
    payment_handler: PaymentConfirmedHandler | None = None,
) -> FastAPI:
    """
    Build the relay application.

    `transport` replaces the network transport of the provider HTTP client
    (tests pass an httpx.MockTransport). `payment_handler` receives verified
    `payment_link.paid` events.
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        async with build_http_client(settings, transport) as http:
            application.state.link_creator = LinkCreator(
                RazorpayClient(http, credentials),
                description=settings.link_description,
            )
            yield

    application = FastAPI(title="Payment Link Relay", lifespan=lifespan)
    application.state.webhook_verifier = WebhookVerifier(
        credentials, payment_handler or LoggingPaymentHandler(),
    )

    @application.middleware("http")
    async def cors(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        return _apply_cors_headers(response, settings.allowed_origin)

    @application.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> Response:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = JSONResponse(status_code=500, content={"error": "internal server error"})
        return _apply_cors_headers(response, settings.allowed_origin)

    @application.get("/")
    async def health() -> Response:
        return PlainTextResponse(HEALTH_TEXT)

    @application.post("/api/create-link")
    async def create_link(request: Request) -> Response:
        raw = await request.body()
        if len(raw) > settings.max_body_size:
            return JSONResponse(status_code=413, content={"error": PAYLOAD_TOO_LARGE})

        try:
            body = _decode_json(raw)
            result = await request.app.state.link_creator.create(body)
        except InvalidAmountError:
            return JSONResponse(status_code=400, content={"error": AMOUNT_REQUIRED})
        except ProviderRejectedError as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "payment provider error", "details": exc.details},
            )
        except ProviderUnreachableError as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "payment provider unreachable"},
            )
        except MalformedUpstreamResponseError as exc:
            logger.error("Malformed payment provider response: %s", exc)
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "malformed payment provider response"},
            )
        except Exception:  # noqa: BLE001
            logger.exception("create-link error")
            return JSONResponse(status_code=500, content={"error": "internal server error"})

        return JSONResponse(content=result.model_dump())

    @application.post("/api/webhook")
    async def receive_webhook(request: Request) -> Response:
        raw = await request.body()
        if len(raw) > settings.max_body_size:
            return PlainTextResponse(PAYLOAD_TOO_LARGE, status_code=413)

        try:
            envelope = WebhookEnvelope(
                raw_body=raw,
                signature=request.headers.get(SIGNATURE_HEADER),
            )
            outcome = request.app.state.webhook_verifier.process(envelope)
        except Exception:  # noqa: BLE001
            logger.exception("webhook error")
            return PlainTextResponse("internal server error", status_code=500)

        return PlainTextResponse(outcome.message, status_code=outcome.status_code)

    return application
