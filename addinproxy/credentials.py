# addinproxy/credentials.py
"""Turn the add-in's Bearer token into AWS credentials.

Supported token formats, sniffed by prefix in this order:

1. ``ABSK<base64(inner)>``            double-encoded; ``inner`` is one of the below
2. ``BedrockAPIKey-<id>:<base64(json)>``  json holds accessKeyId/secretAccessKey[/sessionToken]
3. ``<accessKeyId>:<secretAccessKey>[:<sessionToken>]``
"""
import base64
import binascii
import json
from dataclasses import dataclass, field

from .errors import CredentialFormatError

INDIRECTION_MARKER = "ABSK"
LABEL_PREFIX = "BedrockAPIKey"

# One ABSK unwrap plus the terminal parse.
_MAX_DEPTH = 2


@dataclass(frozen=True)
class UpstreamCredentials:
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)

    def redacted(self) -> str:
        """Loggable form of the access key id."""
        return f"{self.access_key_id[:8]}..."


def _b64decode_text(value: str) -> str:
    value = value.strip()
    # btoa() output is frequently stored without its trailing padding.
    value += "=" * (-len(value) % 4)
    raw = base64.b64decode(value, validate=True)
    return raw.decode("utf-8")


def _parse_labeled(token: str) -> UpstreamCredentials:
    _, sep, encoded = token.partition(":")
    if not sep:
        raise CredentialFormatError("Invalid BedrockAPIKey format - missing colon separator")

    try:
        data = json.loads(_b64decode_text(encoded))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise CredentialFormatError(
            f"Failed to parse BedrockAPIKey credentials: {type(exc).__name__}"
        ) from None

    if not isinstance(data, dict):
        raise CredentialFormatError(
            "Failed to parse BedrockAPIKey credentials: expected a JSON object"
        )

    access_key_id = data.get("accessKeyId")
    secret_access_key = data.get("secretAccessKey")
    if not (isinstance(access_key_id, str) and access_key_id) or not (
        isinstance(secret_access_key, str) and secret_access_key
    ):
        raise CredentialFormatError(
            "Invalid credentials JSON - missing accessKeyId or secretAccessKey"
        )

    session_token = data.get("sessionToken")
    return UpstreamCredentials(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token if isinstance(session_token, str) and session_token else None,
    )


def _parse_direct(token: str) -> UpstreamCredentials:
    parts = [p.strip() for p in token.split(":")]
    if len(parts) not in (2, 3):
        raise CredentialFormatError(
            "Invalid direct credential format - expected accessKeyId:secretAccessKey[:sessionToken]"
        )
    if not parts[0] or not parts[1]:
        raise CredentialFormatError(
            "Invalid direct credential format - accessKeyId and secretAccessKey must not be empty"
        )
    return UpstreamCredentials(
        access_key_id=parts[0],
        secret_access_key=parts[1],
        session_token=(parts[2] or None) if len(parts) == 3 else None,
    )


def parse(bearer_token: str) -> UpstreamCredentials:
    """Parse a Bearer token (without the ``Bearer `` prefix) into credentials.

    Raises CredentialFormatError for empty, malformed or incomplete tokens.
    An ABSK token is unwrapped at most once; a second marker found inside the
    decoded text is handed to the terminal formats as-is.
    """
    if not bearer_token:
        raise CredentialFormatError("Bearer token is required")

    token = bearer_token
    for depth in range(1, _MAX_DEPTH + 1):
        if token.startswith(INDIRECTION_MARKER) and depth < _MAX_DEPTH:
            try:
                token = _b64decode_text(token[len(INDIRECTION_MARKER):])
            except (binascii.Error, UnicodeDecodeError):
                raise CredentialFormatError("Failed to decode ABSK format credentials") from None
            continue

        if token.startswith(LABEL_PREFIX):
            return _parse_labeled(token)
        if ":" in token:
            return _parse_direct(token)
        break

    raise CredentialFormatError(
        "Unrecognized credential format - expected BedrockAPIKey, ABSK, or direct format"
    )
