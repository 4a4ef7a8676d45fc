# Shared Tools
"""
Implementations of the relay's external collaborators.

Each tool implements one capability interface from relay.tools.base so
the pipeline can be exercised with in-memory fakes.
"""

from relay.tools.base import ArtifactStore, AuditLog, Notifier
from relay.tools.dynamodb import DynamoDBAuditLog
from relay.tools.email import MailgunNotifier, SESNotifier, build_notifier
from relay.tools.http import (
    ArtifactSource,
    ResponseReader,
    build_http_client,
    open_artifact_stream,
)
from relay.tools.s3 import S3ArtifactStore, build_artifact_key

__all__ = [
    # Interfaces
    "ArtifactStore",
    "AuditLog",
    "Notifier",
    # DynamoDB tools
    "DynamoDBAuditLog",
    # Email tools
    "MailgunNotifier",
    "SESNotifier",
    "build_notifier",
    # HTTP tools
    "ArtifactSource",
    "ResponseReader",
    "build_http_client",
    "open_artifact_stream",
    # S3 tools
    "S3ArtifactStore",
    "build_artifact_key",
]
