# addinproxy/bedrock.py
import asyncio
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .bodies import ResponseBody, body_from
from .credentials import UpstreamCredentials
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class BedrockInvoker:
    """Calls Bedrock InvokeModel with the caller's own credentials.

    A client is built per call: credentials belong to the request and must
    not outlive it.
    """

    def __init__(self, settings) -> None:
        self.settings = settings
        # No botocore retries: a failed call fails the request.
        self._config = Config(
            connect_timeout=settings.bedrock_connect_timeout,
            read_timeout=settings.bedrock_read_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        )

    def _client(self, credentials: UpstreamCredentials):
        # Private session per call: the boto3 default session is not thread-safe.
        session = boto3.session.Session()
        return session.client(
            "bedrock-runtime",
            region_name=self.settings.bedrock_region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            config=self._config,
        )

    def _invoke_sync(self, credentials: UpstreamCredentials, model_id: str, body: bytes):
        client = self._client(credentials)
        return client.invoke_model(
            modelId=model_id,
            body=body,
            contentType="application/json",
            accept="application/json",
        )

    async def invoke(
        self, credentials: UpstreamCredentials, model_id: str, body: bytes
    ) -> ResponseBody:
        try:
            response = await asyncio.to_thread(self._invoke_sync, credentials, model_id, body)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Bedrock invoke_model failed for model %s: %s", model_id, exc)
            # Reported to the browser as a 500 carrying only the botocore summary.
            raise UpstreamError(error=str(exc), status_code=500) from exc
        return body_from(response.get("body"))
