"""
Submission Validator

Pure decision over a decoded submission: either a terminal outcome to
report, or None when the artifact should be transferred.
"""

from relay.models.events import SubmissionEvent, SubmissionStatus
from relay.models.outcome import Outcome

ARCHIVE_EXTENSION = ".zip"


def unsupported_status_message(raw_status: str) -> str:
    return f"unsupported submission status '{raw_status}', only Successful submissions are stored."


def validate_submission(
    event: SubmissionEvent,
    *,
    allow_unrecognized_status: bool = False,
) -> Outcome | None:
    """
    Decide whether a submission proceeds to transfer.

    Checks run in order:
    1. status Failed -> upstream failure carrying the upstream log message
    2. URL not ending in .zip -> validation failure
    3. status neither Successful nor allowed by policy -> validation failure

    Returns:
        Terminal Outcome, or None if the submission is valid
    """
    if event.status is SubmissionStatus.FAILED:
        return Outcome.upstream_failure(event.log_message)

    if not event.submission_url.endswith(ARCHIVE_EXTENSION):
        return Outcome.validation_failure()

    if event.status is not SubmissionStatus.SUCCESSFUL and not allow_unrecognized_status:
        return Outcome.validation_failure(unsupported_status_message(event.status_label))

    return None
