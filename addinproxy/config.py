# addinproxy/config.py
from pydantic_settings import BaseSettings

from .events import MetadataDefaults

DEFAULT_MODEL_ID = "anthropic.claude-3-haiku-20240307-v1:0"


class LoggingSettings(BaseSettings):
    # Shared by both entry points.
    log_level: str = "INFO"                           # LOG_LEVEL

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}


class InferenceSettings(BaseSettings):
    # Bedrock upstream
    bedrock_region: str = "us-east-1"                 # BEDROCK_REGION
    default_model_id: str = DEFAULT_MODEL_ID          # DEFAULT_MODEL_ID
    bedrock_connect_timeout: float = 10.0             # BEDROCK_CONNECT_TIMEOUT (seconds)
    bedrock_read_timeout: float = 120.0               # BEDROCK_READ_TIMEOUT (seconds)

    # CORS
    allowed_origin: str = "*"                         # ALLOWED_ORIGIN

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}


class TelemetrySettings(BaseSettings):
    # Splunk HEC. Both are optional at startup; a request arriving without
    # them is answered with a 500 configuration error.
    splunk_hec_token: str | None = None               # SPLUNK_HEC_TOKEN
    splunk_hec_url: str | None = None                 # SPLUNK_HEC_URL
    hec_timeout: float = 25.0                         # HEC_TIMEOUT (seconds)

    # Default event metadata, overridden per event by the caller.
    splunk_index: str | None = None                   # SPLUNK_INDEX
    splunk_host: str | None = None                    # SPLUNK_HOST
    splunk_source: str | None = None                  # SPLUNK_SOURCE
    splunk_sourcetype: str | None = None              # SPLUNK_SOURCETYPE

    allowed_origin: str = "*"                         # ALLOWED_ORIGIN

    @property
    def is_configured(self) -> bool:
        return bool(self.splunk_hec_token and self.splunk_hec_url)

    @property
    def hec_endpoint(self) -> str:
        return (self.splunk_hec_url or "").rstrip("/") + "/services/collector/event"

    @property
    def metadata_defaults(self) -> MetadataDefaults:
        return MetadataDefaults(
            index=self.splunk_index or None,
            host=self.splunk_host or None,
            source=self.splunk_source or None,
            sourcetype=self.splunk_sourcetype or None,
        )

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}
