"""
Batch accumulator: buffers encoded rows until a batch is full
"""

from typing import Optional

from tsload.config import DEFAULT_BATCH_SIZE
from tsload.models import Batch


class BatchAccumulator:
    """
    Owns one reusable byte buffer and a row counter

    A batch is full once the count exceeds the threshold, so a flush
    triggered by should_flush() carries threshold + 1 rows. Single-threaded
    use only: the driver flushes synchronously before appending again.
    """

    def __init__(self, threshold: int = DEFAULT_BATCH_SIZE):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.threshold = threshold
        self._buf = bytearray()
        self._count = 0
        self._next_index = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def size(self) -> int:
        return len(self._buf)

    @property
    def batches_flushed(self) -> int:
        return self._next_index

    def append(self, row: bytes):
        self._buf.extend(row)
        self._count += 1

    def should_flush(self) -> bool:
        return self._count > self.threshold

    def flush(self) -> Optional[Batch]:
        """
        Take the accumulated rows out of the buffer

        Returns:
            The batch, or None when nothing was buffered
        """
        if self._count == 0:
            return None

        batch = Batch(index=self._next_index, payload=bytes(self._buf), row_count=self._count)
        self._buf.clear()
        self._count = 0
        self._next_index += 1
        return batch
