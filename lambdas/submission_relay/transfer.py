"""
Transfer Engine

Streams a submitted artifact from its source URL into object storage in
a single pass. The download is read only as fast as the store consumes
it, through a buffer of at most ``read_size`` bytes on the network side
and one upload part on the storage side.
"""

import time

import httpx
import structlog

from relay.exceptions import StorageWriteError, TransferError
from relay.models.events import SubmissionEvent
from relay.models.outcome import StoredArtifact
from relay.tools.base import ArtifactStore
from relay.tools.http import open_artifact_stream
from relay.tools.s3 import build_artifact_key

log = structlog.get_logger()

# httpx raises InvalidURL and StreamError outside the HTTPError hierarchy
SOURCE_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError)


def describe_source_error(error: Exception) -> str:
    """Human-readable cause for a failed download."""
    if isinstance(error, httpx.HTTPStatusError):
        return (
            f"source returned HTTP {error.response.status_code} "
            f"for {error.request.url}"
        )
    return str(error) or type(error).__name__


class TransferEngine:
    """Copies validated submissions from their URL into an ArtifactStore."""

    def __init__(
        self,
        store: ArtifactStore,
        http_client: httpx.Client,
        *,
        read_size: int = 64 * 1024,
    ) -> None:
        self._store = store
        self._client = http_client
        self._read_size = read_size

    def transfer(self, event: SubmissionEvent, submission_id: str) -> StoredArtifact:
        """
        Stream ``event.submission_url`` into the store.

        Completes only once the store reports a finished write. Partial
        objects left by an aborted write are not cleaned up here.

        Args:
            event: Validated submission
            submission_id: Per-invocation identifier used in the key

        Returns:
            Location and size of the stored artifact

        Raises:
            TransferError: On any source read or storage write failure
        """
        key = build_artifact_key(
            event.recipient_email,
            event.assignment_id,
            submission_id,
            event.file_name,
        )
        url = event.submission_url
        start_time = time.time()

        log.info(
            "transfer_started",
            source_url=url,
            bucket=self._store.bucket,
            key=key,
        )

        bytes_read = 0
        try:
            with open_artifact_stream(url, client=self._client, read_size=self._read_size) as source:
                try:
                    artifact = self._store.write(key, source.reader)
                finally:
                    bytes_read = source.bytes_read
        except StorageWriteError as e:
            log.error(
                "transfer_failed",
                leg="storage",
                key=key,
                bytes_read=bytes_read,
                error=e.message,
            )
            raise TransferError(key=key, source_url=url, cause=e.message) from e
        except SOURCE_ERRORS as e:
            cause = describe_source_error(e)
            log.error(
                "transfer_failed",
                leg="source",
                key=key,
                bytes_read=bytes_read,
                error=cause,
            )
            raise TransferError(key=key, source_url=url, cause=cause) from e

        log.info(
            "transfer_completed",
            bucket=artifact.bucket,
            key=artifact.key,
            size_bytes=artifact.size_bytes,
            duration_ms=int((time.time() - start_time) * 1000),
        )

        return artifact
