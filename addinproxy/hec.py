# addinproxy/hec.py
import logging
from typing import Any

import httpx

from .errors import UpstreamError
from .gateway import dumps_json

logger = logging.getLogger(__name__)

USER_AGENT = "addin-hec-proxy/1.0"
_FORWARD_ERROR = "Failed to forward events to Splunk"


class HecForwarder:
    """POSTs canonical events to the Splunk HTTP Event Collector."""

    def __init__(self, settings, http_client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.http_client = http_client

    def _headers(self, content: bytes) -> dict[str, str]:
        return {
            "Authorization": f"Splunk {self.settings.splunk_hec_token}",
            "Content-Type": "application/json",
            "Content-Length": str(len(content)),
            "User-Agent": USER_AGENT,
        }

    async def _post(self, client: httpx.AsyncClient, content: bytes) -> httpx.Response:
        return await client.post(
            self.settings.hec_endpoint,
            content=content,
            headers=self._headers(content),
            timeout=self.settings.hec_timeout,
        )

    async def send(self, payload: Any) -> Any:
        content = dumps_json(payload).encode("utf-8")
        try:
            if self.http_client is not None:
                resp = await self._post(self.http_client, content)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._post(client, content)
        except httpx.TimeoutException:
            raise UpstreamError(
                "Timeout forwarding events to Splunk HEC", error=_FORWARD_ERROR
            ) from None
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Network error forwarding to Splunk: {exc}", error=_FORWARD_ERROR
            ) from exc

        if not resp.is_success:
            raise UpstreamError(
                f"Splunk HEC responded with status {resp.status_code}: {resp.text}",
                error=_FORWARD_ERROR,
            )

        try:
            return resp.json()
        except ValueError:
            # HEC fronted by a load balancer may answer 2xx with plain text.
            return {"text": resp.text, "statusCode": resp.status_code}
