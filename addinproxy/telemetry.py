# addinproxy/telemetry.py
import logging

import httpx

from .errors import ConfigurationError, InternalError, PayloadParseError, ProxyError
from .events import normalize_payload
from .gateway import (
    cors_headers,
    error_response,
    get_body,
    get_header,
    get_method,
    loads_json,
    preflight_response,
    respond,
)
from .hec import HecForwarder

logger = logging.getLogger(__name__)


class TelemetryProxyHandler:
    """Splunk HEC proxy: the collector token never leaves the server."""

    def __init__(
        self,
        settings,
        forwarder: HecForwarder | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.forwarder = forwarder or HecForwarder(settings, http_client)
        self.headers = cors_headers(settings.allowed_origin)

    async def handle(self, event: dict) -> dict:
        method = get_method(event)
        logger.info(
            "splunk-proxy: httpMethod=%s origin=%s",
            method or "none", get_header(event, "origin") or "none",
        )

        try:
            if method == "OPTIONS":
                return preflight_response(self.headers)
            return await self._forward(event)
        except ProxyError as exc:
            logger.error("splunk-proxy: %s: %s", exc.error, exc.details or exc.message)
            return error_response(exc, self.headers)
        except Exception:
            logger.exception("splunk-proxy: unexpected error")
            return error_response(InternalError(), self.headers)

    async def _forward(self, event: dict) -> dict:
        if not self.settings.is_configured:
            raise ConfigurationError()

        try:
            telemetry = loads_json(get_body(event) or "{}")
        except ValueError as exc:
            raise PayloadParseError(str(exc)) from exc

        payload = normalize_payload(telemetry, self.settings.metadata_defaults)
        count = len(payload) if isinstance(payload, list) else 1
        logger.info("splunk-proxy: processing %d events", count)

        collector_response = await self.forwarder.send(payload)
        logger.info("splunk-proxy: forwarded %d events to Splunk", count)

        return respond(
            200,
            {
                "message": "Events forwarded successfully",
                "count": count,
                "collectorResponse": collector_response,
            },
            self.headers,
        )
