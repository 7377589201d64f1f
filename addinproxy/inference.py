# addinproxy/inference.py
import logging
from typing import Any

from . import credentials as credential_parser
from .bedrock import BedrockInvoker
from .errors import (
    CredentialFormatError,
    InternalError,
    MissingCredentialsError,
    ProxyError,
    UpstreamError,
)
from .gateway import (
    cors_headers,
    dumps_json,
    error_response,
    get_body,
    get_header,
    get_method,
    loads_json,
    preflight_response,
    respond,
)

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def split_model_request(raw_body: str, default_model_id: str) -> tuple[str, bytes]:
    """Pick the model id and build the body forwarded to InvokeModel.

    JSON objects lose their ``modelId`` key; every other key is passed on
    verbatim. Bodies that are not JSON are forwarded as the raw text.
    """
    if not raw_body:
        return default_model_id, b"{}"

    try:
        data: Any = loads_json(raw_body)
    except ValueError:
        return default_model_id, raw_body.encode("utf-8")

    model_id = default_model_id
    if isinstance(data, dict):
        requested = data.pop("modelId", None)
        if isinstance(requested, str) and requested:
            model_id = requested
    return model_id, dumps_json(data).encode("utf-8")


class InferenceProxyHandler:
    """Bedrock proxy: the browser supplies AWS credentials as a Bearer token."""

    def __init__(self, settings, invoker: BedrockInvoker | None = None) -> None:
        self.settings = settings
        self.invoker = invoker or BedrockInvoker(settings)
        self.headers = cors_headers(settings.allowed_origin, "X-Amz-Security-Token")

    def _reply(self, status_code: int, payload: Any) -> dict:
        return respond(status_code, payload, self.headers, multi_value=True)

    async def handle(self, event: dict) -> dict:
        method = get_method(event)
        logger.info(
            "bedrock-proxy: httpMethod=%s origin=%s",
            method or "none", get_header(event, "origin") or "none",
        )

        try:
            if method == "OPTIONS":
                return preflight_response(self.headers, multi_value=True)
            return await self._invoke(event)
        except ProxyError as exc:
            return error_response(exc, self.headers, multi_value=True)
        except Exception:
            logger.exception("bedrock-proxy: handler error")
            return error_response(InternalError(), self.headers, multi_value=True)

    async def _invoke(self, event: dict) -> dict:
        auth = get_header(event, "authorization")
        if not auth or not auth.startswith(_BEARER_PREFIX):
            raise MissingCredentialsError()

        logger.info("bedrock-proxy: processing bearer token format")
        try:
            creds = credential_parser.parse(auth[len(_BEARER_PREFIX):])
        except CredentialFormatError as exc:
            logger.error("bedrock-proxy: failed to parse user credentials: %s", exc)
            raise
        logger.info("bedrock-proxy: extracted credentials for access key: %s", creds.redacted())

        model_id, body = split_model_request(get_body(event), self.settings.default_model_id)

        response_body = await self.invoker.invoke(creds, model_id, body)

        try:
            raw = await response_body.read_text()
            decoded = loads_json(raw) if raw else {}
        except ValueError:
            logger.exception("bedrock-proxy: failed to decode response body")
            raise UpstreamError(error="Failed to decode Bedrock response", status_code=500)

        return self._reply(200, decoded)
