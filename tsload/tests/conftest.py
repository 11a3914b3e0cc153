"""
Pytest configuration and shared fixtures for tsload tests
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from tsload.config import GeneratorConfig
from tsload.context.fields import FieldValueTable
from tsload.models import CompressedBatch, Point, PushResult
from tsload.protocols import SimulatorProtocol, SinkProtocol

T0 = datetime(2023, 12, 13, 0, 0, 1, tzinfo=timezone.utc)


class ListSimulator(SimulatorProtocol):
    """
    Simulator replaying a fixed list of yields

    Each item is a dict with name/tags/fields, or None for a yield the
    simulator marks as not written.
    """

    def __init__(self, items: List[Optional[Dict[str, Any]]]):
        self.items = items
        self.calls = 0

    def finished(self) -> bool:
        return self.calls >= len(self.items)

    def next(self, point: Point) -> bool:
        assert not self.finished(), "next() called after finished()"
        item = self.items[self.calls]
        self.calls += 1
        if item is None:
            return False
        point.set_measurement_name(item.get('name', 'cpu'))
        point.set_timestamp(item.get('ts', T0))
        for key, value in item.get('tags', []):
            point.append_tag(key, value)
        for key, value in item.get('fields', [('usage_user', 99.0)]):
            point.append_field(key, value)
        return True


class RecordingSink(SinkProtocol):
    """Sink that keeps every pushed batch in memory"""

    def __init__(self):
        self.batches: List[CompressedBatch] = []
        self.closed = False

    def push(self, batch: CompressedBatch) -> PushResult:
        self.batches.append(batch)
        return PushResult(batch_index=batch.index, status_code=204)

    def close(self):
        self.closed = True


def host_points(count: int, start: int = 0) -> List[Dict[str, Any]]:
    """count cpu points, one per host_i, one second apart"""
    return [
        {
            'name': 'cpu',
            'ts': T0 + timedelta(seconds=i),
            'tags': [('hostname', f'host_{i}')],
            'fields': [('usage_user', float(i))],
        }
        for i in range(start, start + count)
    ]


@pytest.fixture
def field_table() -> FieldValueTable:
    return FieldValueTable({'usage_user': 12.5, 'usage_system': 3.0})


@pytest.fixture
def cpu_point() -> Point:
    point = Point()
    point.set_measurement_name('cpu')
    point.set_timestamp(T0)
    point.append_tag('hostname', 'host_0')
    point.append_field('usage_user', 77.7)
    return point


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_config():
    """Factory for small, valid configs"""
    def _make(**overrides) -> GeneratorConfig:
        base = dict(
            use='devops',
            scale=1,
            timestamp_start='2023-12-13T00:00:00Z',
            timestamp_end='2023-12-13T00:01:00Z',
            batch_size=5,
        )
        base.update(overrides)
        return GeneratorConfig(**base)
    return _make
