"""
Unit tests for the transfer engine.

Downloads are served by an httpx MockTransport; storage is in memory.
"""

import httpx
import pytest

from lambdas.submission_relay.transfer import TransferEngine, describe_source_error
from relay.exceptions import TransferError
from relay.models.events import SubmissionEvent
from tests.mocks.fakes import FailingArtifactStore, InMemoryArtifactStore
from tests.mocks.http import ArtifactServer, BrokenStream


class CountingStream(httpx.SyncByteStream):
    """Response body that records how many chunks the client pulled."""

    def __init__(self, chunk: bytes, count: int):
        self._chunk = chunk
        self._count = count
        self.yielded = 0

    def __iter__(self):
        for _ in range(self._count):
            self.yielded += 1
            yield self._chunk


@pytest.fixture
def event(successful_message) -> SubmissionEvent:
    return SubmissionEvent.from_message(successful_message)


class TestTransferEngine:

    def test_copies_artifact_byte_for_byte(self, event, artifact_url, artifact_bytes, artifact_store):
        server = ArtifactServer({artifact_url: artifact_bytes})

        with server.client() as client:
            artifact = TransferEngine(artifact_store, client, read_size=1024).transfer(event, "sub-1")

        assert artifact.key == "a@b.com/hw1/sub-1/hw1.zip"
        assert artifact.bucket == "test-submissions"
        assert artifact.size_bytes == len(artifact_bytes)
        assert artifact_store.objects[artifact.key] == artifact_bytes

    def test_empty_artifact(self, event, artifact_url, artifact_store):
        server = ArtifactServer({artifact_url: b""})

        with server.client() as client:
            artifact = TransferEngine(artifact_store, client).transfer(event, "sub-1")

        assert artifact.size_bytes == 0
        assert artifact_store.objects[artifact.key] == b""

    def test_single_get_per_transfer(self, event, artifact_url, artifact_bytes, artifact_store):
        server = ArtifactServer({artifact_url: artifact_bytes})

        with server.client() as client:
            TransferEngine(artifact_store, client).transfer(event, "sub-1")

        assert len(server.requests) == 1
        assert server.requests[0].method == "GET"

    def test_source_not_found(self, event, artifact_store):
        server = ArtifactServer()

        with server.client() as client, pytest.raises(TransferError) as exc_info:
            TransferEngine(artifact_store, client).transfer(event, "sub-1")

        assert exc_info.value.cause == "source returned HTTP 404 for https://x/y/hw1.zip"
        assert exc_info.value.key == "a@b.com/hw1/sub-1/hw1.zip"
        assert artifact_store.objects == {}

    def test_stream_drops_mid_transfer(self, event, artifact_url, artifact_store):
        server = ArtifactServer({artifact_url: BrokenStream([b"PK\x03\x04", b"x" * 2048])})

        with server.client() as client, pytest.raises(TransferError) as exc_info:
            TransferEngine(artifact_store, client, read_size=512).transfer(event, "sub-1")

        assert "connection reset by peer" in exc_info.value.cause

    def test_storage_failure(self, event, artifact_url, artifact_bytes):
        store = FailingArtifactStore(fail_after=1024, message="bucket quota exceeded")
        server = ArtifactServer({artifact_url: artifact_bytes})

        with server.client() as client, pytest.raises(TransferError) as exc_info:
            TransferEngine(store, client).transfer(event, "sub-1")

        assert "bucket quota exceeded" in exc_info.value.cause
        assert exc_info.value.source_url == artifact_url

    def test_download_paced_by_store(self, event, artifact_url):
        # 100 chunks of 1 KiB available; the store gives up after 4 KiB
        stream = CountingStream(b"z" * 1024, 100)
        server = ArtifactServer({artifact_url: stream})
        store = FailingArtifactStore(fail_after=4096)

        with server.client() as client, pytest.raises(TransferError):
            TransferEngine(store, client, read_size=1024).transfer(event, "sub-1")

        assert store.bytes_accepted == 4096
        assert stream.yielded <= 8

    def test_distinct_submission_ids_give_distinct_keys(
        self, event, artifact_url, artifact_bytes, artifact_store
    ):
        server = ArtifactServer({artifact_url: artifact_bytes})

        with server.client() as client:
            engine = TransferEngine(artifact_store, client)
            first = engine.transfer(event, "sub-1")
            second = engine.transfer(event, "sub-2")

        assert first.key != second.key
        assert len(artifact_store.objects) == 2


class TestDescribeSourceError:

    def test_status_error(self):
        request = httpx.Request("GET", "https://x/y/hw1.zip")
        response = httpx.Response(403, request=request)
        error = httpx.HTTPStatusError("forbidden", request=request, response=response)

        assert describe_source_error(error) == "source returned HTTP 403 for https://x/y/hw1.zip"

    def test_transport_error(self):
        assert describe_source_error(httpx.ConnectError("name resolution failed")) == (
            "name resolution failed"
        )

    def test_error_without_message(self):
        assert describe_source_error(httpx.ReadTimeout("")) == "ReadTimeout"
