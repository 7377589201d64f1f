# addinproxy/test_credentials.py
import base64
import json

import pytest

from addinproxy.credentials import UpstreamCredentials, parse
from addinproxy.errors import CredentialFormatError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _labeled(creds: dict, label: str = "BedrockAPIKey-5jf0-at-1234") -> str:
    return f"{label}:{_b64(json.dumps(creds))}"


def _absk(inner: str) -> str:
    return "ABSK" + _b64(inner)


# ---------------------------------------------------------------------------
# Direct format
# ---------------------------------------------------------------------------


class TestDirectFormat:
    def test_two_parts(self):
        creds = parse("AKIA123:secret456")
        assert creds == UpstreamCredentials("AKIA123", "secret456", None)

    def test_three_parts(self):
        creds = parse("AKIA123:secret456:token789")
        assert creds.access_key_id == "AKIA123"
        assert creds.secret_access_key == "secret456"
        assert creds.session_token == "token789"

    def test_parts_are_trimmed(self):
        creds = parse(" AKIA123 : secret456 ")
        assert creds.access_key_id == "AKIA123"
        assert creds.secret_access_key == "secret456"

    def test_empty_session_token_is_absent(self):
        assert parse("AKIA123:secret456:").session_token is None

    @pytest.mark.parametrize("token", ["a:b:c:d", "a:b:c:d:e"])
    def test_too_many_parts_rejected(self, token):
        with pytest.raises(CredentialFormatError, match="expected accessKeyId"):
            parse(token)

    @pytest.mark.parametrize("token", [":secret", "AKIA123:", " : "])
    def test_empty_required_part_rejected(self, token):
        with pytest.raises(CredentialFormatError):
            parse(token)


# ---------------------------------------------------------------------------
# Labeled-JSON format
# ---------------------------------------------------------------------------


class TestLabeledFormat:
    def test_round_trip_without_session_token(self):
        creds = parse(_labeled({"accessKeyId": "AKIA1", "secretAccessKey": "s1"}))
        assert creds == UpstreamCredentials("AKIA1", "s1", None)

    def test_round_trip_with_session_token(self):
        token = _labeled(
            {"accessKeyId": "AKIA1", "secretAccessKey": "s1", "sessionToken": "t1"}
        )
        assert parse(token) == UpstreamCredentials("AKIA1", "s1", "t1")

    def test_unpadded_base64_accepted(self):
        encoded = _b64(json.dumps({"accessKeyId": "AKIA1", "secretAccessKey": "s12"}))
        token = "BedrockAPIKey-x:" + encoded.rstrip("=")
        assert parse(token).secret_access_key == "s12"

    def test_missing_colon(self):
        with pytest.raises(CredentialFormatError, match="missing colon separator"):
            parse("BedrockAPIKey-nocolon")

    def test_missing_secret(self):
        with pytest.raises(CredentialFormatError, match="missing accessKeyId or secretAccessKey"):
            parse(_labeled({"accessKeyId": "AKIA1"}))

    def test_json_array_rejected(self):
        with pytest.raises(CredentialFormatError, match="expected a JSON object"):
            parse("BedrockAPIKey-x:" + _b64("[1, 2]"))

    def test_invalid_base64(self):
        with pytest.raises(CredentialFormatError, match="Failed to parse BedrockAPIKey"):
            parse("BedrockAPIKey-x:!!!not-base64!!!")

    def test_invalid_json(self):
        with pytest.raises(CredentialFormatError, match="Failed to parse BedrockAPIKey"):
            parse("BedrockAPIKey-x:" + _b64("{not json"))

    def test_error_does_not_echo_secret(self):
        token = "BedrockAPIKey-x:" + _b64('{"accessKeyId": "AKIA1", "secretAccessKey": ')
        with pytest.raises(CredentialFormatError) as exc_info:
            parse(token)
        assert "AKIA1" not in str(exc_info.value)


# ---------------------------------------------------------------------------
# ABSK indirection
# ---------------------------------------------------------------------------


class TestIndirection:
    def test_wraps_labeled_format(self):
        inner = _labeled({"accessKeyId": "AKIA1", "secretAccessKey": "s1", "sessionToken": "t"})
        assert parse(_absk(inner)) == parse(inner)

    def test_wraps_direct_format(self):
        assert parse(_absk("AKIA123:secret456")) == parse("AKIA123:secret456")

    def test_second_level_not_unwrapped(self):
        # The inner ABSK token has no colon, so the terminal parse rejects it.
        token = _absk(_absk("AKIA123:secret456").replace("=", ""))
        with pytest.raises(CredentialFormatError, match="Unrecognized credential format"):
            parse(token)

    def test_undecodable_payload(self):
        with pytest.raises(CredentialFormatError, match="Failed to decode ABSK"):
            parse("ABSK***")

    def test_decoded_text_must_match_a_format(self):
        with pytest.raises(CredentialFormatError, match="Unrecognized credential format"):
            parse(_absk("just-some-text"))


# ---------------------------------------------------------------------------
# Anything else
# ---------------------------------------------------------------------------


class TestUnrecognized:
    def test_empty_token(self):
        with pytest.raises(CredentialFormatError, match="Bearer token is required"):
            parse("")

    def test_single_part(self):
        with pytest.raises(CredentialFormatError, match="Unrecognized credential format"):
            parse("AKIA123")

    def test_status_code_is_401(self):
        with pytest.raises(CredentialFormatError) as exc_info:
            parse("AKIA123")
        assert exc_info.value.status_code == 401


class TestUpstreamCredentials:
    def test_repr_hides_secrets(self):
        creds = UpstreamCredentials("AKIAABCDEFGH", "topsecret", "sessiontok")
        assert "topsecret" not in repr(creds)
        assert "sessiontok" not in repr(creds)

    def test_redacted_prefix(self):
        assert UpstreamCredentials("AKIAABCDEFGH", "s").redacted() == "AKIAABCD..."
