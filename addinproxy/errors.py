# addinproxy/errors.py
"""Error taxonomy shared by both proxies.

Every ``ProxyError`` knows the HTTP status it maps to and the short,
caller-visible summary placed in the ``error`` field of the response body.
Messages must never carry key material or the collector token.
"""


class ProxyError(Exception):
    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        details: str | None = None,
        *,
        error: str | None = None,
        message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.message = message
        super().__init__(details or self.error)

    def to_body(self) -> dict:
        body: dict = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.details:
            body["details"] = self.details
        return body


class CredentialFormatError(ProxyError):
    """Bearer token is empty, malformed or lacks a required field."""

    status_code = 401
    error = "Invalid AWS credentials format"


class MissingCredentialsError(ProxyError):
    status_code = 401
    error = "AWS credentials required"

    def __init__(self) -> None:
        super().__init__(
            message="Please provide AWS credentials in Authorization header as Bearer token"
        )


class ConfigurationError(ProxyError):
    status_code = 500
    error = "Splunk configuration missing"

    def __init__(self) -> None:
        super().__init__(
            message="HEC token and URL must be configured in Lambda environment variables"
        )


class PayloadParseError(ProxyError):
    status_code = 400
    error = "Invalid JSON payload"


class UpstreamError(ProxyError):
    """Network failure, timeout or non-2xx reply from Bedrock or Splunk HEC."""

    status_code = 502
    error = "Upstream request failed"


class InternalError(ProxyError):
    status_code = 500
    error = "Internal server error"
