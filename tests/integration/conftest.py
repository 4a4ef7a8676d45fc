"""
Integration test fixtures and configuration.

Integration tests drive the Lambda handler end to end against moto-mocked
AWS services, with artifact downloads served by an httpx MockTransport.
"""

from dataclasses import dataclass

import pytest
from moto.core import DEFAULT_ACCOUNT_ID
from moto.ses.models import ses_backends

from tests.mocks.http import ArtifactServer


@dataclass
class FakeLambdaContext:
    aws_request_id: str = "req-integration-0001"
    function_name: str = "submission-relay"


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


@pytest.fixture
def artifact_server(artifact_url, artifact_bytes, monkeypatch) -> ArtifactServer:
    """
    Serve artifacts to the handler instead of the network.

    The handler builds its HTTP client per invocation; the patch hands it
    a client bound to this server.
    """
    server = ArtifactServer({artifact_url: artifact_bytes})
    monkeypatch.setattr(
        "lambdas.submission_relay.handler.build_http_client",
        lambda settings=None: server.client(),
    )
    return server


@pytest.fixture
def sent_emails(mock_aws_all):
    """Messages accepted by the mocked SES backend."""
    return ses_backends[DEFAULT_ACCOUNT_ID]["us-west-2"].sent_messages
