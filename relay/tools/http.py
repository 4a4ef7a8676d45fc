"""
HTTP Source Tools

Streams a remote artifact as a bounded, file-like reader so it can be
handed straight to an upload without buffering the whole body.
"""

import io
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx
import structlog

from relay.config import Settings, get_settings

log = structlog.get_logger()


def build_http_client(settings: Settings | None = None) -> httpx.Client:
    """
    Build the HTTP client used for artifact downloads and the email API.

    A ``None`` timeout leaves the deadline to the invoking platform.
    """
    settings = settings or get_settings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
    )


class ResponseReader(io.RawIOBase):
    """
    Raw reader over an iterator of response chunks.

    Chunks are pulled from the network only when the consumer asks for
    more bytes, so the download never runs ahead of the upload.
    """

    def __init__(self, chunks: Iterator[bytes]) -> None:
        super().__init__()
        self._chunks = chunks
        self._pending = memoryview(b"")
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = memoryview(next(self._chunks))
            except StopIteration:
                return 0

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        self.bytes_read += size
        return size


@dataclass
class ArtifactSource:
    """Open download of one artifact."""

    url: str
    reader: io.BufferedReader
    raw: ResponseReader
    content_type: str | None
    content_length: int | None

    @property
    def bytes_read(self) -> int:
        return self.raw.bytes_read


@contextmanager
def open_artifact_stream(
    url: str,
    *,
    client: httpx.Client,
    read_size: int = 64 * 1024,
) -> Iterator[ArtifactSource]:
    """
    Open a streaming GET for ``url``.

    The response is closed when the context exits, whether or not the
    body was fully consumed.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response
        httpx.HTTPError: On connection or read failure
    """
    log.debug("opening_artifact_stream", url=url)

    with client.stream("GET", url) as response:
        response.raise_for_status()

        length = response.headers.get("Content-Length")
        raw = ResponseReader(response.iter_bytes(chunk_size=read_size))
        source = ArtifactSource(
            url=url,
            reader=io.BufferedReader(raw, buffer_size=read_size),
            raw=raw,
            content_type=response.headers.get("Content-Type"),
            content_length=int(length) if length and length.isdigit() else None,
        )

        log.debug(
            "artifact_stream_opened",
            url=url,
            status_code=response.status_code,
            content_length=source.content_length,
        )

        yield source
