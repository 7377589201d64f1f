# addinproxy/main.py
"""Local HTTP front for both proxies.

Replays each request as an API Gateway proxy event so the add-in can be
developed against ``uvicorn addinproxy.main:app`` with the exact code that
runs in Lambda.
"""
import base64
import logging
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import Response

from .config import InferenceSettings, LoggingSettings, TelemetrySettings
from .inference import InferenceProxyHandler
from .telemetry import TelemetryProxyHandler

inference_settings = InferenceSettings()
telemetry_settings = TelemetrySettings()

logging.basicConfig(
    level=LoggingSettings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Shared HTTP client; its connection pool is reused across HEC forwards.
    app.state.http_client = httpx.AsyncClient()
    app.state.inference = InferenceProxyHandler(inference_settings)
    app.state.telemetry = TelemetryProxyHandler(
        telemetry_settings, http_client=app.state.http_client
    )
    logger.info("Proxy handlers initialised (HEC configured=%s)", telemetry_settings.is_configured)

    yield

    await app.state.http_client.aclose()


app = FastAPI(title="Add-in Proxy", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Propagate or generate an X-Request-ID header for end-to-end tracing."""
    req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers["x-request-id"] = req_id
    return response


async def to_gateway_event(request: Request) -> dict:
    raw = await request.body()
    try:
        body, encoded = raw.decode("utf-8"), False
    except UnicodeDecodeError:
        body, encoded = base64.b64encode(raw).decode("ascii"), True
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "body": body or None,
        "isBase64Encoded": encoded,
    }


def to_response(envelope: dict) -> Response:
    return Response(
        content=envelope["body"],
        status_code=envelope["statusCode"],
        headers=envelope["headers"],
        media_type="application/json",
    )


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.api_route("/bedrock", methods=["POST", "OPTIONS"])
async def bedrock(request: Request) -> Response:
    envelope = await request.app.state.inference.handle(await to_gateway_event(request))
    return to_response(envelope)


@app.api_route("/splunk", methods=["POST", "OPTIONS"])
async def splunk(request: Request) -> Response:
    envelope = await request.app.state.telemetry.handle(await to_gateway_event(request))
    return to_response(envelope)
