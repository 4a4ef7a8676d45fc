"""
Submission Relay Pipeline

Composes validator, transfer engine and reporter into one invocation:

    DECODED -> UPSTREAM_FAILURE | VALIDATION_FAILURE -> REPORTED
    DECODED -> TRANSFERRING -> SUCCESS | TRANSFER_ERROR -> REPORTED

Collaborators are injected so the relay holds no state between
invocations and tests can supply in-memory fakes.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from relay.config import Settings, get_settings
from relay.exceptions import ReportingError, TransferError
from relay.models.dynamo import new_submission_id
from relay.models.events import SubmissionEvent
from relay.models.outcome import Outcome
from relay.state_machine import RelayState, StateTracker
from relay.tools.dynamodb import DynamoDBAuditLog
from relay.tools.email import build_notifier
from relay.tools.s3 import S3ArtifactStore

from lambdas.submission_relay.event_decoder import decode_notification
from lambdas.submission_relay.reporter import OutcomeReporter
from lambdas.submission_relay.transfer import TransferEngine
from lambdas.submission_relay.validator import validate_submission

log = structlog.get_logger()


@dataclass
class RelayResult:
    """Result of one invocation, as seen by the invoking platform."""

    submission_id: str
    outcome: Outcome
    states: list[str] = field(default_factory=list)
    email_message_id: str = ""
    audit_recorded: bool = False
    error: str | None = None
    error_type: str | None = None

    @property
    def succeeded(self) -> bool:
        """True when reporting completed, whatever the submission outcome."""
        return self.error is None

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": "success" if self.succeeded else "error",
            "submission_id": self.submission_id,
            "outcome": self.outcome.kind.value,
            "email_message_id": self.email_message_id,
            "audit_recorded": self.audit_recorded,
            "states": self.states,
        }
        if self.outcome.artifact is not None:
            body["object_key"] = self.outcome.artifact.key
        if self.outcome.error_message:
            body["detail"] = self.outcome.error_message
        if self.error is not None:
            body["error"] = self.error
            body["error_type"] = self.error_type
        return body


class SubmissionRelay:
    """Relays one submission from notification to stored artifact and email."""

    def __init__(
        self,
        transfer_engine: TransferEngine,
        reporter: OutcomeReporter,
        *,
        allow_unrecognized_status: bool = False,
        raise_on_audit_failure: bool = False,
        id_factory: Callable[[], str] = new_submission_id,
    ) -> None:
        self._transfer = transfer_engine
        self._reporter = reporter
        self._allow_unrecognized_status = allow_unrecognized_status
        self._raise_on_audit_failure = raise_on_audit_failure
        self._id_factory = id_factory

    def handle(self, envelope: Any) -> RelayResult:
        """
        Decode an envelope and process it.

        Raises:
            DecodeError: If the envelope is malformed; nothing is reported
        """
        return self.process(decode_notification(envelope))

    def process(self, event: SubmissionEvent) -> RelayResult:
        """Validate, transfer if valid, and report the outcome."""
        submission_id = self._id_factory()
        tracker = StateTracker()

        with structlog.contextvars.bound_contextvars(
            submission_id=submission_id,
            assignment_id=event.assignment_id,
        ):
            outcome = validate_submission(
                event,
                allow_unrecognized_status=self._allow_unrecognized_status,
            )

            if outcome is None:
                tracker.advance(RelayState.TRANSFERRING)
                try:
                    artifact = self._transfer.transfer(event, submission_id)
                    outcome = Outcome.success(artifact)
                except TransferError as e:
                    outcome = Outcome.transfer_error(e.cause)
            else:
                log.info(
                    "submission_rejected",
                    outcome=outcome.kind.value,
                    reason=outcome.error_message,
                )

            tracker.advance(outcome.kind.state)

            result = RelayResult(submission_id=submission_id, outcome=outcome)
            try:
                report = self._reporter.report(outcome, event, submission_id)
                result.email_message_id = report.email_message_id
                result.audit_recorded = report.audit_recorded
                if report.audit_error and self._raise_on_audit_failure:
                    result.error = report.audit_error
                    result.error_type = "AuditWriteError"
            except ReportingError as e:
                result.error = e.message
                result.error_type = type(e).__name__

            tracker.advance(RelayState.REPORTED)
            result.states = tracker.history

            log.info(
                "submission_relayed",
                outcome=outcome.kind.value,
                succeeded=result.succeeded,
                states=result.states,
            )

        return result


def build_relay(
    settings: Settings | None = None,
    *,
    http_client: httpx.Client,
) -> SubmissionRelay:
    """
    Wire the relay against the configured AWS and email services.

    Called once per invocation; the caller owns ``http_client``.
    """
    settings = settings or get_settings()

    engine = TransferEngine(
        S3ArtifactStore.from_settings(settings),
        http_client,
        read_size=settings.transfer_read_size,
    )
    reporter = OutcomeReporter(
        build_notifier(settings, http_client=http_client),
        DynamoDBAuditLog.from_settings(settings),
        subject_prefix=settings.email_subject_prefix,
    )

    return SubmissionRelay(
        engine,
        reporter,
        allow_unrecognized_status=settings.allow_unrecognized_status,
        raise_on_audit_failure=settings.raise_on_audit_failure,
    )
