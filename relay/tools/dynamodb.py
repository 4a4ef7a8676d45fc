"""
DynamoDB Tools

Append-only audit log of delivery records. Each record is written once,
keyed by submissionId, and never updated or deleted by the relay.
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
import structlog

from relay.config import Settings, get_settings
from relay.exceptions import AuditWriteError
from relay.models.dynamo import DeliveryRecord
from relay.tools.base import AuditLog

log = structlog.get_logger()


def _get_table(settings: Settings):
    """Get DynamoDB table resource."""
    dynamodb = boto3.resource("dynamodb", **settings.dynamodb_config)
    return dynamodb.Table(settings.audit_table_name)


class DynamoDBAuditLog(AuditLog):
    """Audit log backed by a DynamoDB table with partition key submissionId."""

    def __init__(self, table_name: str, *, table=None) -> None:
        self.table_name = table_name
        self._table = table

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DynamoDBAuditLog":
        settings = settings or get_settings()
        return cls(settings.audit_table_name, table=_get_table(settings))

    @property
    def table(self):
        if self._table is None:
            self._table = _get_table(get_settings())
        return self._table

    def append(self, record: DeliveryRecord) -> None:
        """
        Write a delivery record.

        The write is conditional on the submissionId being new, so an
        existing record is never overwritten.

        Raises:
            AuditWriteError: On DynamoDB failure, including a duplicate ID
        """
        log.debug(
            "writing_delivery_record",
            submission_id=record.submission_id,
            status=record.status,
        )

        try:
            self.table.put_item(
                Item=record.to_dynamodb(),
                ConditionExpression="attribute_not_exists(submissionId)",
            )
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            log.error(
                "dynamodb_put_failed",
                submission_id=record.submission_id,
                table_name=self.table_name,
                error_code=error_code,
                error=str(e),
            )
            raise AuditWriteError(
                table_name=self.table_name,
                submission_id=record.submission_id,
                error_message=f"{error_code}: {e.response['Error'].get('Message', '')}",
            ) from e
        except BotoCoreError as e:
            log.error(
                "dynamodb_put_failed",
                submission_id=record.submission_id,
                table_name=self.table_name,
                error=str(e),
            )
            raise AuditWriteError(
                table_name=self.table_name,
                submission_id=record.submission_id,
                error_message=str(e),
            ) from e

        log.info(
            "delivery_record_written",
            submission_id=record.submission_id,
            status=record.status,
        )
