# addinproxy/lambda_function.py
"""AWS Lambda entry points.

Configure the functions with handler ``addinproxy.lambda_function.bedrock_handler``
and ``addinproxy.lambda_function.splunk_handler``. Settings are read from the
environment once per cold start.
"""
import asyncio
import logging

from .config import InferenceSettings, LoggingSettings, TelemetrySettings
from .inference import InferenceProxyHandler
from .telemetry import TelemetryProxyHandler

_inference_settings = InferenceSettings()
_telemetry_settings = TelemetrySettings()

# The Lambda runtime installs its own root handler; only the level is ours.
logging.getLogger().setLevel(LoggingSettings().log_level.upper())

_inference = InferenceProxyHandler(_inference_settings)
_telemetry = TelemetryProxyHandler(_telemetry_settings)


def bedrock_handler(event: dict, context) -> dict:  # noqa: ANN001
    return asyncio.run(_inference.handle(event))


def splunk_handler(event: dict, context) -> dict:  # noqa: ANN001
    return asyncio.run(_telemetry.handle(event))
