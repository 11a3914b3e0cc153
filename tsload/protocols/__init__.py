"""
Protocols (interfaces) for tsload components.

This module defines abstract contracts that implementations must follow.
The pipeline driver depends only on these, so tests can swap in synthetic
simulators and sinks.
"""

from abc import ABC, abstractmethod
from tsload.models import Point, CompressedBatch, PushResult

__all__ = [
    'SimulatorProtocol',
    'CompressorProtocol',
    'SinkProtocol',
]


class SimulatorProtocol(ABC):
    """Protocol for workload simulators."""

    @abstractmethod
    def finished(self) -> bool:
        """Return True once no more points will be produced."""
        pass

    @abstractmethod
    def next(self, point: Point) -> bool:
        """
        Produce the next point into a reusable buffer.

        Args:
            point: Point buffer to fill

        Returns:
            True if the point was populated and should be written
        """
        pass


class CompressorProtocol(ABC):
    """Protocol for batch compression/decompression."""

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        """Compress byte data."""
        pass

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        """Decompress byte data."""
        pass

    @property
    @abstractmethod
    def content_encoding(self) -> str:
        """Return the HTTP Content-Encoding name of this scheme."""
        pass


class SinkProtocol(ABC):
    """Protocol for destinations of compressed batches."""

    @abstractmethod
    def push(self, batch: CompressedBatch) -> PushResult:
        """Deliver one compressed batch, raising TransportError on failure."""
        pass

    def close(self):
        """Release any held resources."""
        pass
