"""
Configuration Management

Pydantic-settings based configuration for the submission relay.
All settings can be overridden via environment variables.
"""

import json
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.exceptions import ConfigurationError

MIN_PART_SIZE = 5 * 1024 * 1024  # S3 multipart minimum


class Settings(BaseSettings):
    """
    Relay settings loaded from environment variables.

    Environment variables are prefixed with RELAY_ and are case-insensitive.
    Example: RELAY_STORAGE_BUCKET_NAME=course-submissions
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=[".env.local", ".env"],  # Try .env.local first
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Object storage
    storage_bucket_name: str = Field(
        ...,
        min_length=1,
        description="Bucket receiving submitted artifacts",
    )
    storage_credentials_json: SecretStr = Field(
        ...,
        description="JSON object with aws_access_key_id / aws_secret_access_key",
    )
    storage_endpoint_url: str | None = Field(
        default=None,
        description="Object storage endpoint URL (for local development)",
    )

    # Email gateway
    email_backend: Literal["mailgun", "ses"] = Field(
        default="mailgun",
        description="Gateway used to deliver status emails",
    )
    mailgun_api_key: SecretStr | None = Field(
        default=None,
        description="Mailgun API key",
    )
    mailgun_domain: str | None = Field(
        default=None,
        description="Mailgun sending domain",
    )
    mailgun_base_url: str = Field(
        default="https://api.mailgun.net/v3",
        description="Mailgun API base URL (EU accounts use api.eu.mailgun.net)",
    )
    ses_endpoint_url: str | None = Field(
        default=None,
        description="SES endpoint URL (for local development)",
    )
    email_from_address: str | None = Field(
        default=None,
        description="From address for status emails (default: mailgun@<domain>)",
    )
    email_from_name: str = Field(
        default="Assignment Submissions",
        description="Display name for status emails",
    )
    email_subject_prefix: str = Field(
        default="",
        description="Text prepended to every subject, e.g. a course code",
    )

    # Audit store
    audit_table_name: str = Field(
        ...,
        min_length=1,
        description="DynamoDB table receiving delivery records",
    )
    dynamodb_endpoint_url: str | None = Field(
        default=None,
        description="DynamoDB endpoint URL (for local development)",
    )

    # Transfer
    transfer_part_size: int = Field(
        default=8 * 1024 * 1024,
        ge=MIN_PART_SIZE,
        description="Bytes buffered between the download and the upload",
    )
    transfer_read_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Bytes requested from the network per read",
    )
    http_timeout_seconds: float | None = Field(
        default=None,
        description="Source download timeout; None defers to the platform deadline",
    )

    # Policies
    allow_unrecognized_status: bool = Field(
        default=False,
        description="Transfer submissions whose status is Pending or unknown",
    )
    raise_on_audit_failure: bool = Field(
        default=False,
        description="Fail the invocation when the delivery record cannot be written",
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-west-2",
        description="AWS region",
    )

    # Application Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("storage_credentials_json")
    @classmethod
    def _check_credentials(cls, value: SecretStr) -> SecretStr:
        try:
            parsed = json.loads(value.get_secret_value())
        except json.JSONDecodeError as e:
            raise ValueError(f"storage credentials are not valid JSON: {e.msg}") from e
        if not isinstance(parsed, dict):
            raise ValueError("storage credentials must be a JSON object")
        missing = [
            k for k in ("aws_access_key_id", "aws_secret_access_key") if not parsed.get(k)
        ]
        if missing:
            raise ValueError(f"storage credentials missing keys: {missing}")
        return value

    @model_validator(mode="after")
    def _check_email_gateway(self) -> "Settings":
        if self.email_backend == "mailgun":
            if self.mailgun_api_key is None or not self.mailgun_api_key.get_secret_value():
                raise ValueError("mailgun_api_key is required when email_backend is 'mailgun'")
            if not self.mailgun_domain:
                raise ValueError("mailgun_domain is required when email_backend is 'mailgun'")
        elif not self.email_from_address:
            raise ValueError("email_from_address is required when email_backend is 'ses'")
        return self

    @property
    def sender(self) -> str:
        """Formatted sender identity for outbound email."""
        address = self.email_from_address or f"mailgun@{self.mailgun_domain}"
        if self.email_from_name:
            return f"{self.email_from_name} <{address}>"
        return address

    @property
    def storage_credentials(self) -> dict[str, str]:
        """Credential kwargs for the storage client."""
        parsed = json.loads(self.storage_credentials_json.get_secret_value())
        creds = {
            "aws_access_key_id": parsed["aws_access_key_id"],
            "aws_secret_access_key": parsed["aws_secret_access_key"],
        }
        if parsed.get("aws_session_token"):
            creds["aws_session_token"] = parsed["aws_session_token"]
        return creds

    @property
    def s3_config(self) -> dict:
        """S3 client configuration."""
        config = {"region_name": self.aws_region, **self.storage_credentials}
        if self.storage_endpoint_url:
            config["endpoint_url"] = self.storage_endpoint_url
        return config

    @property
    def dynamodb_config(self) -> dict:
        """DynamoDB client configuration."""
        config = {"region_name": self.aws_region}
        if self.dynamodb_endpoint_url:
            config["endpoint_url"] = self.dynamodb_endpoint_url
        return config

    @property
    def ses_config(self) -> dict:
        """SES client configuration."""
        config = {"region_name": self.aws_region}
        if self.ses_endpoint_url:
            config["endpoint_url"] = self.ses_endpoint_url
        return config


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, failing with ConfigurationError.

    Keyword overrides take precedence over environment values.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationError(
            "Invalid relay configuration",
            problems=problems,
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached relay settings.

    Uses lru_cache to ensure settings are loaded only once per container.
    Call get_settings.cache_clear() in tests after changing the environment.
    """
    return load_settings()
