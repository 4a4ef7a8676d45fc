"""
Unit tests for relay configuration.

Settings are built through load_settings so that missing or malformed
values surface as ConfigurationError at startup.
"""

import json

import pytest

from relay.config import get_settings, load_settings
from relay.exceptions import ConfigurationError


class TestLoadSettings:

    def test_loads_from_environment(self):
        settings = load_settings()

        assert settings.storage_bucket_name == "test-submissions"
        assert settings.audit_table_name == "TestEmailDelivery"
        assert settings.email_backend == "ses"
        assert settings.http_timeout_seconds is None
        assert settings.allow_unrecognized_status is False
        assert settings.raise_on_audit_failure is False

    def test_unused_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("RELAY_ENVIRONMENT", "production")

        settings = load_settings()

        assert not hasattr(settings, "environment")

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_missing_bucket_is_configuration_error(self, monkeypatch):
        monkeypatch.delenv("RELAY_STORAGE_BUCKET_NAME")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert any("storage_bucket_name" in p for p in exc_info.value.context["problems"])

    def test_missing_audit_table_is_configuration_error(self, monkeypatch):
        monkeypatch.delenv("RELAY_AUDIT_TABLE_NAME")

        with pytest.raises(ConfigurationError):
            get_settings()

    def test_malformed_credentials(self, monkeypatch):
        monkeypatch.setenv("RELAY_STORAGE_CREDENTIALS_JSON", "{not json")

        with pytest.raises(ConfigurationError, match="Invalid relay configuration"):
            load_settings()

    def test_credentials_missing_secret(self, monkeypatch):
        monkeypatch.setenv(
            "RELAY_STORAGE_CREDENTIALS_JSON",
            json.dumps({"aws_access_key_id": "AKIA"}),
        )

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert "aws_secret_access_key" in " ".join(exc_info.value.context["problems"])

    def test_mailgun_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("RELAY_MAILGUN_API_KEY")

        with pytest.raises(ConfigurationError):
            load_settings(email_backend="mailgun")

    def test_mailgun_requires_domain(self, monkeypatch):
        monkeypatch.delenv("RELAY_MAILGUN_DOMAIN")

        with pytest.raises(ConfigurationError):
            load_settings(email_backend="mailgun")

    def test_ses_requires_from_address(self, monkeypatch):
        monkeypatch.delenv("RELAY_EMAIL_FROM_ADDRESS")

        with pytest.raises(ConfigurationError):
            load_settings(email_backend="ses")

    def test_part_size_below_multipart_minimum(self):
        with pytest.raises(ConfigurationError):
            load_settings(transfer_part_size=1024)


class TestDerivedSettings:

    def test_mailgun_default_sender(self, monkeypatch):
        monkeypatch.delenv("RELAY_EMAIL_FROM_ADDRESS")

        settings = load_settings(email_backend="mailgun")

        assert settings.sender == "Assignment Submissions <mailgun@mg.example.com>"

    def test_sender_without_display_name(self):
        settings = load_settings(email_from_name="")

        assert settings.sender == "noreply@example.com"

    def test_s3_config_carries_credentials(self):
        settings = load_settings(storage_endpoint_url="http://localhost:4566")

        assert settings.s3_config == {
            "region_name": "us-west-2",
            "aws_access_key_id": "testing",
            "aws_secret_access_key": "testing",
            "endpoint_url": "http://localhost:4566",
        }

    def test_session_token_passed_through(self, monkeypatch):
        monkeypatch.setenv(
            "RELAY_STORAGE_CREDENTIALS_JSON",
            json.dumps({
                "aws_access_key_id": "AKIA",
                "aws_secret_access_key": "secret",
                "aws_session_token": "token",
            }),
        )

        assert load_settings().storage_credentials["aws_session_token"] == "token"

    def test_credentials_hidden_in_repr(self):
        assert "testing" not in repr(load_settings().storage_credentials_json)
