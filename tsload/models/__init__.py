"""
Data models for tsload.

This module contains pure data structures with no pipeline logic.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

__all__ = [
    'Point',
    'FieldType',
    'DecodedRow',
    'Batch',
    'CompressedBatch',
    'PushResult',
    'RunSummary',
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Point:
    """
    One simulated measurement, reused across simulator iterations.

    Tags and fields are kept as parallel key/value lists in insertion order.
    A point is valid for one encode call; reset() clears it in place so the
    same lists are refilled on the next iteration.
    """

    __slots__ = ('measurement_name', 'timestamp', 'tag_keys', 'tag_values',
                 'field_keys', 'field_values')

    def __init__(self):
        self.measurement_name: str = ''
        self.timestamp: Optional[datetime] = None
        self.tag_keys: List[str] = []
        self.tag_values: List[Any] = []
        self.field_keys: List[str] = []
        self.field_values: List[Any] = []

    def set_measurement_name(self, name: str):
        self.measurement_name = name

    def set_timestamp(self, ts: datetime):
        self.timestamp = ts

    def append_tag(self, key: str, value: Any):
        self.tag_keys.append(key)
        self.tag_values.append(value)

    def append_field(self, key: str, value: Any):
        self.field_keys.append(key)
        self.field_values.append(value)

    def timestamp_millis(self) -> int:
        """Timestamp as integer milliseconds since the Unix epoch."""
        if self.timestamp is None:
            raise ValueError("point has no timestamp")
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        delta = ts - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000

    def reset(self):
        self.measurement_name = ''
        self.timestamp = None
        self.tag_keys.clear()
        self.tag_values.clear()
        self.field_keys.clear()
        self.field_values.clear()

    def __repr__(self):
        return (f"Point(name={self.measurement_name!r}, ts={self.timestamp}, "
                f"tags={len(self.tag_keys)}, fields={len(self.field_keys)})")


class FieldType(IntEnum):
    """Aggregation kind attached to every encoded field."""
    UNSPECIFIED = 0
    DELTA_SUM = 1
    MIN = 2
    MAX = 3
    LAST = 4
    FIRST = 5
    GAUGE = 6


@dataclass
class DecodedRow:
    """A row read back from its binary form."""
    name: str
    timestamp: int  # milliseconds since epoch
    tags: List[Tuple[str, str]]
    fields: List[Tuple[str, FieldType, float]]

    def tag_dict(self) -> Dict[str, str]:
        return dict(self.tags)


@dataclass
class Batch:
    """Concatenated rows taken out of the accumulator by one flush."""
    index: int
    payload: bytes
    row_count: int

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass
class CompressedBatch:
    """A batch after compression, ready to be pushed."""
    index: int
    payload: bytes
    row_count: int
    raw_size: int
    content_encoding: str

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass
class PushResult:
    """Outcome of a successful push"""
    batch_index: int
    status_code: Optional[int] = None  # None for non-HTTP sinks
    attempts: int = 1
    elapsed: float = 0.0


@dataclass
class RunSummary:
    """Counters collected over one pipeline run."""
    yields: int = 0
    attributed: int = 0
    rows_written: int = 0
    skipped: Dict[str, int] = dataclass_field(default_factory=dict)
    batches_sent: int = 0
    raw_bytes: int = 0
    compressed_bytes: int = 0
    retries: int = 0
    elapsed: float = 0.0

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())

    @property
    def compression_ratio(self) -> float:
        return self.raw_bytes / self.compressed_bytes if self.compressed_bytes else 0.0

    @property
    def rows_per_second(self) -> float:
        return self.rows_written / self.elapsed if self.elapsed > 0 else 0.0

    def record_skip(self, reason: str):
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'yields': self.yields,
            'attributed': self.attributed,
            'rows_written': self.rows_written,
            'skipped': dict(self.skipped),
            'batches_sent': self.batches_sent,
            'raw_bytes': self.raw_bytes,
            'compressed_bytes': self.compressed_bytes,
            'compression_ratio': round(self.compression_ratio, 3),
            'retries': self.retries,
            'elapsed': round(self.elapsed, 3),
        }
