"""Sink handing artifacts straight back to the caller."""

from typing import List

from .base import ArtifactSink


class MemorySink(ArtifactSink):
    """
    Accepts every artifact for immediate delivery to the caller.

    The bytes travel back in the ConversionResult; only the names are
    recorded here, in delivery order.
    """

    def __init__(self):
        self.delivered: List[str] = []

    def save(self, name: str, data: bytes) -> str:
        self.delivered.append(name)
        return name
