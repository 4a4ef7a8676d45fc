"""
S3 Tools

Object storage for submitted artifacts. Keys follow the layout
{email}/{assignment_id}/{submission_id}/{file_name}.
"""

from pathlib import PurePosixPath
from typing import BinaryIO

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError
import structlog

from relay.config import Settings, get_settings
from relay.exceptions import StorageWriteError
from relay.models.outcome import StoredArtifact
from relay.tools.base import ArtifactStore

log = structlog.get_logger()


def _get_client(settings: Settings):
    """Get S3 client."""
    return boto3.client("s3", **settings.s3_config)


def build_artifact_key(
    email: str,
    assignment_id: str,
    submission_id: str,
    file_name: str,
) -> str:
    """
    Build the storage key for a submitted artifact.

    Format: {email}/{assignment_id}/{submission_id}/{file_name}

    The submission ID component keeps keys unique across concurrent
    submissions for the same assignment and recipient.
    """
    # Remove any path components
    safe_name = PurePosixPath(file_name).name or "submission.zip"
    return f"{email}/{assignment_id or 'unassigned'}/{submission_id}/{safe_name}"


class _CountingReader:
    """
    Pass-through reader that counts the bytes handed to the uploader.

    Short reads happen only at EOF; the non-seekable upload path treats a
    short read as the end of the object.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.size = 0

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            data = self._stream.read()
        else:
            parts = []
            remaining = size
            while remaining > 0:
                chunk = self._stream.read(remaining)
                if not chunk:
                    break
                parts.append(chunk)
                remaining -= len(chunk)
            data = b"".join(parts)
        self.size += len(data)
        return data


class S3ArtifactStore(ArtifactStore):
    """
    Artifact store backed by an S3 bucket.

    Uploads run on the calling thread with a single in-flight part, so at
    most ``part_size`` bytes are held between the source and the bucket.
    """

    def __init__(
        self,
        bucket: str,
        *,
        client=None,
        part_size: int = 8 * 1024 * 1024,
        content_type: str = "application/zip",
    ) -> None:
        self.bucket = bucket
        self._client = client
        self._content_type = content_type
        self._transfer_config = TransferConfig(
            multipart_threshold=part_size,
            multipart_chunksize=part_size,
            max_concurrency=1,
            use_threads=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "S3ArtifactStore":
        settings = settings or get_settings()
        return cls(
            settings.storage_bucket_name,
            client=_get_client(settings),
            part_size=settings.transfer_part_size,
        )

    @property
    def client(self):
        if self._client is None:
            self._client = _get_client(get_settings())
        return self._client

    def write(self, key: str, stream: BinaryIO) -> StoredArtifact:
        """
        Stream ``stream`` into s3://{bucket}/{key}.

        Raises:
            StorageWriteError: If S3 rejects the upload
        """
        reader = _CountingReader(stream)

        log.info(
            "uploading_artifact",
            bucket=self.bucket,
            key=key,
        )

        try:
            self.client.upload_fileobj(
                reader,
                self.bucket,
                key,
                ExtraArgs={"ContentType": self._content_type},
                Config=self._transfer_config,
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            log.error(
                "s3_upload_failed",
                bucket=self.bucket,
                key=key,
                bytes_sent=reader.size,
                error=str(e),
            )
            raise StorageWriteError(
                bucket=self.bucket,
                key=key,
                error_message=str(e),
            ) from e

        log.info(
            "artifact_uploaded",
            bucket=self.bucket,
            key=key,
            size_bytes=reader.size,
        )

        return StoredArtifact(bucket=self.bucket, key=key, size_bytes=reader.size)
