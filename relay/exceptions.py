"""
Custom Exceptions for the Submission Relay

All exceptions follow the pattern of specific, actionable errors
with context needed for debugging and logging.
"""

from dataclasses import dataclass
from typing import Any


class RelayError(Exception):
    """Base exception for the submission relay."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigurationError(RelayError):
    """Required configuration is missing or malformed at startup."""


@dataclass
class DecodeError(RelayError):
    """Notification envelope could not be decoded into a submission."""

    reason: str

    def __init__(self, reason: str, **context: Any) -> None:
        self.reason = reason
        super().__init__(f"Cannot decode submission notification: {reason}", **context)


@dataclass
class InvalidStateTransitionError(RelayError):
    """Attempted invalid relay state transition."""

    current_state: str
    new_state: str
    allowed_transitions: list[str]

    def __init__(
        self,
        current_state: str,
        new_state: str,
        allowed_transitions: list[str],
    ) -> None:
        self.current_state = current_state
        self.new_state = new_state
        self.allowed_transitions = allowed_transitions
        super().__init__(
            f"Cannot transition from '{current_state}' to '{new_state}'. "
            f"Allowed transitions: {allowed_transitions}",
            current_state=current_state,
            new_state=new_state,
            allowed_transitions=allowed_transitions,
        )


@dataclass
class TransferError(RelayError):
    """Artifact copy from the source URL into object storage failed."""

    key: str
    source_url: str
    cause: str

    def __init__(self, key: str, source_url: str, cause: str) -> None:
        self.key = key
        self.source_url = source_url
        self.cause = cause
        super().__init__(
            f"Transfer of '{source_url}' to '{key}' failed: {cause}",
            key=key,
        )


@dataclass
class ReportingError(RelayError):
    """Status email could not be sent."""

    backend: str
    recipient: str
    error_message: str | None = None

    def __init__(
        self,
        backend: str,
        recipient: str,
        error_message: str | None = None,
    ) -> None:
        self.backend = backend
        self.recipient = recipient
        self.error_message = error_message
        super().__init__(
            f"Email send via {backend} failed for {recipient}: "
            f"{error_message or 'Unknown error'}",
            backend=backend,
            recipient=recipient,
        )


@dataclass
class AuditWriteError(RelayError):
    """Delivery record could not be written to the audit table."""

    table_name: str
    submission_id: str
    error_message: str | None = None

    def __init__(
        self,
        table_name: str,
        submission_id: str,
        error_message: str | None = None,
    ) -> None:
        self.table_name = table_name
        self.submission_id = submission_id
        self.error_message = error_message
        super().__init__(
            f"Delivery record write failed on table '{table_name}': "
            f"{error_message or 'Unknown error'}",
            table_name=table_name,
            submission_id=submission_id,
        )


@dataclass
class StorageWriteError(RelayError):
    """Object storage rejected or aborted an artifact write."""

    bucket: str
    key: str

    def __init__(
        self,
        bucket: str,
        key: str,
        error_message: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"Storage write failed for {bucket}/{key}: {error_message or 'Unknown error'}",
            bucket=bucket,
            key=key,
        )
