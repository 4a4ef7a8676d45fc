"""
Outcome Models

Terminal classification of one relay invocation and the artifact
location produced by a successful transfer.
"""

from dataclasses import dataclass
from enum import Enum

from relay.state_machine import RelayState

INVALID_URL_MESSAGE = "invalid submission URL, must reference a zip file."


class OutcomeKind(str, Enum):
    """Terminal classification of an invocation."""

    UPSTREAM_FAILURE = "UpstreamFailure"
    VALIDATION_FAILURE = "ValidationFailure"
    TRANSFER_ERROR = "TransferError"
    SUCCESS = "Success"

    @property
    def state(self) -> RelayState:
        """Relay state reached when this outcome is decided."""
        return _OUTCOME_STATES[self]

    @property
    def is_success(self) -> bool:
        return self is OutcomeKind.SUCCESS


_OUTCOME_STATES = {
    OutcomeKind.UPSTREAM_FAILURE: RelayState.UPSTREAM_FAILURE,
    OutcomeKind.VALIDATION_FAILURE: RelayState.VALIDATION_FAILURE,
    OutcomeKind.TRANSFER_ERROR: RelayState.TRANSFER_ERROR,
    OutcomeKind.SUCCESS: RelayState.SUCCESS,
}


@dataclass(frozen=True)
class StoredArtifact:
    """Location of an artifact written to object storage."""

    bucket: str
    key: str
    size_bytes: int

    @property
    def path(self) -> str:
        return f"{self.bucket}/{self.key}"


@dataclass(frozen=True)
class Outcome:
    """
    Terminal outcome handed to the reporter.

    ``error_message`` is empty for SUCCESS; ``artifact`` is set only for SUCCESS.
    """

    kind: OutcomeKind
    error_message: str = ""
    artifact: StoredArtifact | None = None

    @classmethod
    def upstream_failure(cls, log_message: str) -> "Outcome":
        return cls(OutcomeKind.UPSTREAM_FAILURE, error_message=log_message)

    @classmethod
    def validation_failure(cls, message: str = INVALID_URL_MESSAGE) -> "Outcome":
        return cls(OutcomeKind.VALIDATION_FAILURE, error_message=message)

    @classmethod
    def transfer_error(cls, cause: str) -> "Outcome":
        return cls(OutcomeKind.TRANSFER_ERROR, error_message=cause)

    @classmethod
    def success(cls, artifact: StoredArtifact) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, artifact=artifact)

    @property
    def record_status(self) -> str:
        """Status literal written to the delivery record."""
        return "Successful" if self.kind.is_success else "Failed"
