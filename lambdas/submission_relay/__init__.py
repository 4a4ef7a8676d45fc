"""
SubmissionRelay Lambda

Triggered by SNS submission notifications.
Copies the submitted zip into S3 and emails the submitter the result.

Trigger: SNS topic receiving submission notifications
Output: Status email (Mailgun or SES) and a DynamoDB delivery record

Flow:
1. Decode the nested SNS message
2. Validate status and submission URL
3. Stream the artifact into S3
4. Report the outcome by email and delivery record
"""

from lambdas.submission_relay.event_decoder import decode_notification, extract_message
from lambdas.submission_relay.handler import lambda_handler
from lambdas.submission_relay.pipeline import RelayResult, SubmissionRelay, build_relay
from lambdas.submission_relay.reporter import OutcomeReporter, Report, compose_email
from lambdas.submission_relay.transfer import TransferEngine
from lambdas.submission_relay.validator import validate_submission

__all__ = [
    "lambda_handler",
    "RelayResult",
    "SubmissionRelay",
    "build_relay",
    "decode_notification",
    "extract_message",
    "OutcomeReporter",
    "Report",
    "compose_email",
    "TransferEngine",
    "validate_submission",
]
