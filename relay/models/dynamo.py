"""
DynamoDB Models

Delivery record written once per invocation to the audit table.
Attribute names are camelCase to match the table's existing items.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def new_submission_id() -> str:
    """Fresh identifier for one invocation; never reused across retries."""
    return str(uuid4())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DeliveryRecord(BaseModel):
    """
    Append-only audit entry describing one invocation's outcome.

    Partition key: submissionId
    """

    model_config = ConfigDict(frozen=True)

    submission_id: str = Field(..., min_length=1, description="Per-invocation identifier")
    email: str = Field(..., description="Recipient address")
    status: str = Field(..., description="'Successful' or 'Failed'")
    error_message: str = Field(default="", description="Failure detail, empty on success")
    timestamp: str = Field(default_factory=_now_iso, description="ISO-8601 write time")

    def to_dynamodb(self) -> dict[str, Any]:
        """Convert to DynamoDB item."""
        return {
            "submissionId": self.submission_id,
            "email": self.email,
            "status": self.status,
            "errorMessage": self.error_message,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dynamodb(cls, item: dict[str, Any]) -> "DeliveryRecord":
        """Parse from DynamoDB item."""
        return cls(
            submission_id=item["submissionId"],
            email=item.get("email", ""),
            status=item.get("status", ""),
            error_message=item.get("errorMessage", ""),
            timestamp=item.get("timestamp", ""),
        )
