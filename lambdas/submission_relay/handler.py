"""
SubmissionRelay Lambda Handler

Main entry point for relaying assignment submissions.
Parses SNS submission notifications, copies the artifact into S3 and
reports the outcome to the submitter.

Trigger: SNS topic receiving submission notifications
Output: Status email to the submitter, delivery record in DynamoDB

Flow:
1. Parse SNS notification into a SubmissionEvent
2. Validate status and submission URL
3. Stream the artifact from its URL into S3
4. Send the status email
5. Write the delivery record
"""

import json
import logging
import time
from typing import Any

import structlog

from relay.config import get_settings
from relay.exceptions import DecodeError
from relay.tools.http import build_http_client

from lambdas.submission_relay.event_decoder import decode_notification
from lambdas.submission_relay.pipeline import build_relay

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    AWS Lambda entry point for submission relaying.

    Args:
        event: Lambda event (SNS notification or direct SNS message)
        context: Lambda execution context

    Returns:
        200 when the status email was sent, 400 for an undecodable
        notification, 500 when reporting failed or an unexpected error
        occurred

    Raises:
        ConfigurationError: If required settings are missing
    """
    start_time = time.time()

    # Configuration problems fail the invocation outright
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    structlog.contextvars.clear_contextvars()

    records = event.get("Records") if isinstance(event, dict) else None
    first = records[0] if isinstance(records, list) and records else None

    log.info(
        "lambda_invoked",
        event_type=first.get("EventSource", "direct") if isinstance(first, dict) else "direct",
        request_id=getattr(context, "aws_request_id", None),
    )

    try:
        submission = decode_notification(event)
    except DecodeError as e:
        log.error("decode_error", error=e.message, **e.context)
        return _response(400, {
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        })

    try:
        with build_http_client(settings) as http_client:
            relay = build_relay(settings, http_client=http_client)
            result = relay.process(submission)
    except Exception as e:
        log.exception("unexpected_error", error=str(e))
        return _response(500, {
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        })

    body = result.to_body()
    body["duration_ms"] = int((time.time() - start_time) * 1000)

    if not result.succeeded:
        log.error(
            "reporting_failed",
            submission_id=result.submission_id,
            error=result.error,
        )
        return _response(500, body)

    log.info(
        "lambda_completed",
        submission_id=result.submission_id,
        outcome=body["outcome"],
        duration_ms=body["duration_ms"],
    )

    return _response(200, body)
