# addinproxy/gateway.py
"""API Gateway proxy-integration plumbing shared by both handlers.

Inbound: the Lambda proxy event (``httpMethod``, ``headers``, ``body``,
``isBase64Encoded``). Outbound: the response envelope. CORS headers go on
every envelope, success or error.
"""
import base64
import binascii
import json
from typing import Any

from .errors import ProxyError

ALLOW_METHODS = "POST, OPTIONS"
BASE_ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With, X-Amz-Date, X-Api-Key"


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def loads_json(text: str):
    """Strict JSON parse: NaN and Infinity are rejected like JSON.parse does."""
    return json.loads(text, parse_constant=_reject_constant)


def dumps_json(payload) -> str:
    return json.dumps(payload, allow_nan=False)


def cors_headers(allowed_origin: str = "*", extra_allow_headers: str = "") -> dict[str, str]:
    allow_headers = BASE_ALLOW_HEADERS
    if extra_allow_headers:
        allow_headers += ", " + extra_allow_headers
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": allow_headers,
        "Access-Control-Max-Age": "86400",
        "Access-Control-Allow-Credentials": "false",
    }


def get_header(event: dict, name: str) -> str | None:
    """Case-insensitive header lookup; API Gateway preserves client casing."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_method(event: dict) -> str:
    method = event.get("httpMethod")
    if not method:
        # HTTP API (payload v2) events carry the method here instead.
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "").upper()


def get_body(event: dict) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded") and body:
        try:
            return base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            # Hand the raw text on; JSON parsing downstream reports the problem.
            return body
    return body


def respond(
    status_code: int,
    payload: Any,
    headers: dict[str, str],
    multi_value: bool = False,
) -> dict[str, Any]:
    envelope: dict[str, Any] = {
        "statusCode": status_code,
        "headers": dict(headers),
        "body": dumps_json(payload),
        "isBase64Encoded": False,
    }
    if multi_value:
        envelope["multiValueHeaders"] = {k: [v] for k, v in headers.items()}
    return envelope


def error_response(exc: ProxyError, headers: dict[str, str], multi_value: bool = False) -> dict:
    return respond(exc.status_code, exc.to_body(), headers, multi_value)


def preflight_response(headers: dict[str, str], multi_value: bool = False) -> dict:
    return respond(200, {"message": "CORS preflight handled"}, headers, multi_value)
