"""
Event Models

Pydantic models for the submission notification delivered over SNS.
The notification body is a JSON string whose fields use snake_case names.
"""

from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubmissionStatus(str, Enum):
    """Upstream status attached to a submission."""

    PENDING = "Pending"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str) -> "SubmissionStatus":
        """Map a raw status string to a member; unrecognized values become UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class SubmissionEvent(BaseModel):
    """
    Decoded assignment submission notification.

    Immutable once decoded. ``raw_status`` keeps the upstream value so an
    unrecognized status can still be reported verbatim.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    submission_url: str = Field(
        default="",
        description="URL of the submitted artifact",
    )
    recipient_email: str = Field(
        ...,
        alias="email",
        min_length=1,
        description="Submitter address receiving the status email",
    )
    status: SubmissionStatus = Field(
        default=SubmissionStatus.UNKNOWN,
        description="Upstream submission status",
    )
    raw_status: str = Field(default="", description="Status exactly as received")
    log_message: str = Field(
        default="",
        description="Upstream failure detail, present when status is Failed",
    )
    assignment_id: str = Field(default="", description="Assignment identifier")

    @field_validator("submission_url", "log_message", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("assignment_id", mode="before")
    @classmethod
    def _assignment_to_str(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_message(cls, message: dict) -> "SubmissionEvent":
        """Build from the parsed notification message."""
        raw_status = message.get("status")
        data = dict(message)
        if raw_status is None:
            data.pop("status", None)
        else:
            raw_status = str(raw_status)
            data["status"] = SubmissionStatus.parse(raw_status)
            data["raw_status"] = raw_status
        return cls.model_validate(data)

    @property
    def file_name(self) -> str:
        """Final path segment of the submission URL."""
        path = urlparse(self.submission_url).path or self.submission_url
        return PurePosixPath(path).name

    @property
    def status_label(self) -> str:
        """Status as received, falling back to the enum value."""
        return self.raw_status or self.status.value
