"""
Pytest Configuration and Shared Fixtures

Provides moto AWS mocking, sample submission events, and test utilities.
"""

import json
import os
from typing import Any

import boto3
import pytest
from moto import mock_aws

# Set test environment before importing application modules
os.environ["RELAY_STORAGE_BUCKET_NAME"] = "test-submissions"
os.environ["RELAY_STORAGE_CREDENTIALS_JSON"] = json.dumps({
    "aws_access_key_id": "testing",
    "aws_secret_access_key": "testing",
})
os.environ["RELAY_AUDIT_TABLE_NAME"] = "TestEmailDelivery"
os.environ["RELAY_EMAIL_BACKEND"] = "ses"
os.environ["RELAY_EMAIL_FROM_ADDRESS"] = "noreply@example.com"
os.environ["RELAY_MAILGUN_API_KEY"] = "key-testing"
os.environ["RELAY_MAILGUN_DOMAIN"] = "mg.example.com"
os.environ["RELAY_AWS_REGION"] = "us-west-2"
os.environ["AWS_DEFAULT_REGION"] = "us-west-2"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

from relay.config import get_settings  # noqa: E402
from tests.mocks.fakes import (  # noqa: E402
    InMemoryArtifactStore,
    InMemoryAuditLog,
    RecordingNotifier,
)
from tests.utils.event_generator import make_sns_event  # noqa: E402

BUCKET = "test-submissions"
TABLE = "TestEmailDelivery"
SENDER = "noreply@example.com"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-west-2",
    }


def _create_bucket(aws_credentials):
    s3 = boto3.client("s3", **aws_credentials)
    s3.create_bucket(
        Bucket=BUCKET,
        CreateBucketConfiguration={"LocationConstraint": "us-west-2"},
    )
    return s3


def _create_table(aws_credentials):
    dynamodb = boto3.resource("dynamodb", **aws_credentials)
    table = dynamodb.create_table(
        TableName=TABLE,
        KeySchema=[{"AttributeName": "submissionId", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "submissionId", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    table.meta.client.get_waiter("table_exists").wait(TableName=TABLE)
    return table


@pytest.fixture
def mock_s3(aws_credentials):
    """Create a mocked S3 bucket."""
    with mock_aws():
        yield _create_bucket(aws_credentials)


@pytest.fixture
def mock_dynamodb(aws_credentials):
    """Create the mocked delivery record table."""
    with mock_aws():
        yield _create_table(aws_credentials)


@pytest.fixture
def mock_ses(aws_credentials):
    """Create a mocked SES client with verified identity."""
    with mock_aws():
        ses = boto3.client("ses", **aws_credentials)
        ses.verify_email_identity(EmailAddress=SENDER)
        yield ses


@pytest.fixture
def mock_aws_all(aws_credentials):
    """
    Mock all AWS services used by the relay.

    Provides a complete mocked AWS environment.
    """
    with mock_aws():
        s3 = _create_bucket(aws_credentials)
        table = _create_table(aws_credentials)
        ses = boto3.client("ses", **aws_credentials)
        ses.verify_email_identity(EmailAddress=SENDER)

        yield {
            "s3": s3,
            "table": table,
            "ses": ses,
        }


# --- Event Fixtures ---


@pytest.fixture
def artifact_url() -> str:
    return "https://x/y/hw1.zip"


@pytest.fixture
def artifact_bytes() -> bytes:
    """Small but non-trivial zip-like payload."""
    return b"PK\x03\x04" + bytes(range(256)) * 64


@pytest.fixture
def successful_message(artifact_url: str) -> dict[str, Any]:
    """Submission message for a valid, successful submission."""
    return {
        "submission_url": artifact_url,
        "email": "a@b.com",
        "status": "Successful",
        "assignment_id": "hw1",
    }


@pytest.fixture
def failed_message() -> dict[str, Any]:
    """Submission message the upstream service marked as failed."""
    return {
        "submission_url": "https://x/y/hw1.zip",
        "email": "a@b.com",
        "status": "Failed",
        "log_message": "Submission deadline has passed",
        "assignment_id": "hw1",
    }


@pytest.fixture
def invalid_url_message() -> dict[str, Any]:
    """Successful submission pointing at something other than a zip."""
    return {
        "submission_url": "https://x/y/hw1.tar.gz",
        "email": "a@b.com",
        "status": "Successful",
        "assignment_id": "hw1",
    }


@pytest.fixture
def sns_event(successful_message: dict[str, Any]) -> dict[str, Any]:
    """SNS envelope around the successful submission."""
    return make_sns_event(successful_message)


# --- Fake Collaborators ---


@pytest.fixture
def artifact_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def audit_log() -> InMemoryAuditLog:
    return InMemoryAuditLog()
