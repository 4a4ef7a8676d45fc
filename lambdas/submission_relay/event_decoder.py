"""
Event Decoder

Extracts the JSON message nested inside an SNS envelope and parses it
into a SubmissionEvent. No side effects.
"""

import json
from typing import Any

from pydantic import ValidationError
import structlog

from relay.exceptions import DecodeError
from relay.models.events import SubmissionEvent

log = structlog.get_logger()


def extract_message(envelope: Any) -> str:
    """
    Pull the raw message string out of a notification envelope.

    Handles both:
    - Lambda trigger from an SNS subscription (Records[0].Sns.Message)
    - Direct SNS message format ({"Message": "..."})

    Raises:
        DecodeError: If no nested message is present
    """
    if not isinstance(envelope, dict):
        raise DecodeError("envelope is not a JSON object")

    if "Records" in envelope:
        records = envelope["Records"]
        if not isinstance(records, list) or not records:
            raise DecodeError("envelope has no records")
        if len(records) > 1:
            log.warning("extra_records_ignored", record_count=len(records))

        record = records[0]
        sns = record.get("Sns") if isinstance(record, dict) else None
        message = sns.get("Message") if isinstance(sns, dict) else None
    else:
        message = envelope.get("Message")

    if message is None:
        raise DecodeError("envelope lacks the nested message field")
    if not isinstance(message, str):
        raise DecodeError("nested message is not a JSON string")

    return message


def decode_notification(envelope: Any) -> SubmissionEvent:
    """
    Decode a notification envelope into a SubmissionEvent.

    Args:
        envelope: Lambda event payload

    Returns:
        Parsed submission event

    Raises:
        DecodeError: If the envelope or its nested message is malformed
    """
    raw = extract_message(envelope)

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(f"nested message is not valid JSON: {e.msg}") from e

    if not isinstance(message, dict):
        raise DecodeError("nested message is not a JSON object")

    try:
        event = SubmissionEvent.from_message(message)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise DecodeError("submission message failed validation", fields=fields) from e

    log.info(
        "submission_decoded",
        assignment_id=event.assignment_id,
        status=event.status_label,
        submission_url=event.submission_url,
    )

    return event
