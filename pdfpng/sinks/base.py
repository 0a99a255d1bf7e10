"""Artifact sink interface."""

from abc import ABC, abstractmethod


class ArtifactSink(ABC):
    """Destination a completed artifact is written or delivered to."""

    @abstractmethod
    def save(self, name: str, data: bytes) -> str:
        """
        Deliver one artifact.

        Args:
            name: Artifact file name
            data: Artifact bytes

        Returns:
            Where the artifact ended up (a path, remote path or name)

        Raises:
            SinkFailure: If the destination rejects the write
        """
        pass
