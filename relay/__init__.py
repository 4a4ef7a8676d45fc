# Shared Infrastructure for the Submission Relay
"""
Shared infrastructure for the submission relay Lambda.

This package provides:
- Relay state machine (RelayState, valid transitions)
- Pydantic models for submission events, outcomes and delivery records
- Tool implementations for S3, Mailgun/SES, DynamoDB and HTTP downloads
- Configuration management
- Custom exceptions
"""

from relay.state_machine import RelayState, VALID_TRANSITIONS, validate_transition
from relay.exceptions import (
    AuditWriteError,
    ConfigurationError,
    DecodeError,
    InvalidStateTransitionError,
    RelayError,
    ReportingError,
    StorageWriteError,
    TransferError,
)
from relay.config import Settings, get_settings, load_settings

__all__ = [
    # State machine
    "RelayState",
    "VALID_TRANSITIONS",
    "validate_transition",
    # Exceptions
    "AuditWriteError",
    "ConfigurationError",
    "DecodeError",
    "InvalidStateTransitionError",
    "RelayError",
    "ReportingError",
    "StorageWriteError",
    "TransferError",
    # Config
    "Settings",
    "get_settings",
    "load_settings",
]
