# Shared Models
"""
Pydantic models for submission events, outcomes, and delivery records.
"""

from relay.models.events import SubmissionEvent, SubmissionStatus
from relay.models.outcome import (
    INVALID_URL_MESSAGE,
    Outcome,
    OutcomeKind,
    StoredArtifact,
)
from relay.models.dynamo import DeliveryRecord, new_submission_id

__all__ = [
    # Events
    "SubmissionEvent",
    "SubmissionStatus",
    # Outcomes
    "INVALID_URL_MESSAGE",
    "Outcome",
    "OutcomeKind",
    "StoredArtifact",
    # DynamoDB
    "DeliveryRecord",
    "new_submission_id",
]
