"""
Capability Interfaces

Narrow interfaces for the three external collaborators of the relay.
Implementations are injected into the pipeline so tests can swap in
in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from relay.models.dynamo import DeliveryRecord
from relay.models.outcome import StoredArtifact


class ArtifactStore(ABC):
    """Durable object storage for submitted artifacts."""

    bucket: str

    @abstractmethod
    def write(self, key: str, stream: BinaryIO) -> StoredArtifact:
        """
        Consume ``stream`` to EOF and store it under ``key``.

        Returns only after the destination reports a completed write.

        Raises:
            StorageWriteError: If the destination rejects the write
        """


class Notifier(ABC):
    """Outbound plain-text email."""

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str) -> str:
        """
        Send one email.

        Returns:
            Gateway message ID

        Raises:
            ReportingError: If the gateway does not accept the message
        """


class AuditLog(ABC):
    """Append-only store of delivery records."""

    @abstractmethod
    def append(self, record: DeliveryRecord) -> None:
        """
        Persist one delivery record.

        Raises:
            AuditWriteError: If the record cannot be written
        """
