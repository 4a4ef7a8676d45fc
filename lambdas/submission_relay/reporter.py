"""
Outcome Reporter

Sends the status email for a terminal outcome and writes the delivery
record. The record write is attempted whether or not the email went out.

Failure policy: an email send failure is raised to the caller; a record
write failure is logged and swallowed, and surfaces only through
Report.audit_error.
"""

from dataclasses import dataclass

import structlog

from relay.exceptions import AuditWriteError, ReportingError
from relay.models.dynamo import DeliveryRecord
from relay.models.events import SubmissionEvent
from relay.models.outcome import INVALID_URL_MESSAGE, Outcome, OutcomeKind
from relay.tools.base import AuditLog, Notifier

log = structlog.get_logger()

FAILURE_SUBJECT = "Assignment Submission Failed"
SUCCESS_SUBJECT = "Assignment Submission Successful"


def compose_email(
    outcome: Outcome,
    event: SubmissionEvent,
    *,
    subject_prefix: str = "",
) -> tuple[str, str]:
    """
    Build the plain-text subject and body for an outcome.

    Returns:
        Tuple of (subject, body)
    """
    # Messages without an assignment ID still get a readable sentence
    assignment = f" {event.assignment_id}" if event.assignment_id else ""

    if outcome.kind is OutcomeKind.SUCCESS:
        subject = SUCCESS_SUBJECT
        quoted = f' "{event.assignment_id}"' if event.assignment_id else ""
        body = (
            f"You successfully submitted the assignment{quoted}. "
            f"It was uploaded to {outcome.artifact.path}."
        )
    elif outcome.kind is OutcomeKind.UPSTREAM_FAILURE:
        subject = FAILURE_SUBJECT
        body = f"You failed to submit your assignment{assignment}: {outcome.error_message}"
    elif outcome.kind is OutcomeKind.VALIDATION_FAILURE:
        subject = FAILURE_SUBJECT
        body = f"You failed to submit your assignment{assignment}: {outcome.error_message}"
        if outcome.error_message == INVALID_URL_MESSAGE:
            body += (
                "\nA valid submission URL must point to a zip file. "
                f"Submitted URL: {event.submission_url or '(none)'}"
            )
    else:
        subject = FAILURE_SUBJECT
        body = (
            f"Your submission for assignment{assignment} could not be stored: "
            f"{outcome.error_message}"
        )

    if subject_prefix:
        subject = f"{subject_prefix.strip()} {subject}"

    return subject, body


@dataclass(frozen=True)
class Report:
    """What the reporter managed to do."""

    email_message_id: str
    audit_error: str | None = None

    @property
    def audit_recorded(self) -> bool:
        return self.audit_error is None


class OutcomeReporter:
    """Delivers the status email and delivery record for one invocation."""

    def __init__(
        self,
        notifier: Notifier,
        audit_log: AuditLog,
        *,
        subject_prefix: str = "",
    ) -> None:
        self._notifier = notifier
        self._audit_log = audit_log
        self._subject_prefix = subject_prefix

    def report(
        self,
        outcome: Outcome,
        event: SubmissionEvent,
        submission_id: str,
    ) -> Report:
        """
        Email the submitter and record the outcome.

        Raises:
            ReportingError: If the email could not be sent (after the
                record write has been attempted)
        """
        subject, body = compose_email(outcome, event, subject_prefix=self._subject_prefix)

        send_error: ReportingError | None = None
        message_id = ""
        try:
            message_id = self._notifier.send(event.recipient_email, subject, body)
        except ReportingError as e:
            send_error = e
            log.error(
                "status_email_failed",
                outcome=outcome.kind.value,
                error=e.message,
            )

        audit_error = self._record(outcome, event, submission_id)

        if send_error is not None:
            raise send_error

        log.info(
            "outcome_reported",
            outcome=outcome.kind.value,
            email_message_id=message_id,
            audit_recorded=audit_error is None,
        )

        return Report(
            email_message_id=message_id,
            audit_error=audit_error.message if audit_error else None,
        )

    def _record(
        self,
        outcome: Outcome,
        event: SubmissionEvent,
        submission_id: str,
    ) -> AuditWriteError | None:
        record = DeliveryRecord(
            submission_id=submission_id,
            email=event.recipient_email,
            status=outcome.record_status,
            error_message=outcome.error_message,
        )
        try:
            self._audit_log.append(record)
        except AuditWriteError as e:
            log.warning(
                "audit_write_failed",
                table_name=e.table_name,
                error=e.message,
            )
            return e
        return None
