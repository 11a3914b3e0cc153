"""
Row encoding: one Point -> one flatMetricsV1 Metric row

Each row is a size-prefixed FlatBuffer (int32 length, then the Metric
buffer), which is how the database's write endpoint reads a body of
application/flatbuffer rows. A batch is a plain concatenation of rows with
no batch-level header or footer.
"""

import struct
from typing import Iterator, List, Tuple

import flatbuffers
from flatbuffers import number_types, util

from tsload.context.encoding import flat_metrics as fm
from tsload.context.fields import FieldValueTable
from tsload.exceptions import RowDecodeError, UnsupportedTagTypeError
from tsload.models import DecodedRow, FieldType, Point

_SIZE_PREFIX = number_types.Int32Flags.bytewidth


class RowEncoder:
    """
    Encode points into Metric rows

    Field values are never taken from the point: each field name is looked
    up in the FieldValueTable and written as a SimpleField of type Last.
    The builder is reused across calls and cleared after every encode,
    including ones that fail.
    """

    field_type = FieldType.LAST

    def __init__(self, initial_size: int = 1024):
        self._builder = flatbuffers.Builder(initial_size)

    def encode(self, point: Point, table: FieldValueTable) -> bytes:
        """
        Encode one point

        Args:
            point: Populated point buffer
            table: Field value lookup for the active workload

        Returns:
            Size-prefixed Metric bytes

        Raises:
            UnsupportedTagTypeError: a tag value is neither str nor None
        """
        tags = self._tags(point)
        builder = self._builder
        try:
            name = builder.CreateString(point.measurement_name)
            key_values = self._key_values(builder, tags)
            simple_fields = self._simple_fields(builder, point, table)

            fm.MetricStart(builder)
            fm.MetricAddName(builder, name)
            fm.MetricAddTimestamp(builder, point.timestamp_millis())
            fm.MetricAddKeyValues(builder, key_values)
            fm.MetricAddSimpleFields(builder, simple_fields)
            builder.FinishSizePrefixed(fm.MetricEnd(builder))
            return bytes(builder.Output())
        finally:
            builder.Clear()

    @staticmethod
    def _tags(point: Point) -> List[Tuple[str, str]]:
        tags = []
        for key, value in zip(point.tag_keys, point.tag_values):
            if value is None:
                continue
            if not isinstance(value, str):
                raise UnsupportedTagTypeError(point.measurement_name, key, type(value))
            tags.append((key, value))
        return tags

    @staticmethod
    def _key_values(builder: flatbuffers.Builder, tags: List[Tuple[str, str]]) -> int:
        offsets = []
        for key, value in tags:
            key_off = builder.CreateString(key)
            value_off = builder.CreateString(value)
            fm.KeyValueStart(builder)
            fm.KeyValueAddKey(builder, key_off)
            fm.KeyValueAddValue(builder, value_off)
            offsets.append(fm.KeyValueEnd(builder))

        fm.MetricStartKeyValuesVector(builder, len(offsets))
        for off in reversed(offsets):
            builder.PrependUOffsetTRelative(off)
        return builder.EndVector()

    def _simple_fields(self, builder: flatbuffers.Builder, point: Point, table: FieldValueTable) -> int:
        offsets = []
        for field_name in point.field_keys:
            name_off = builder.CreateString(field_name)
            fm.SimpleFieldStart(builder)
            fm.SimpleFieldAddName(builder, name_off)
            fm.SimpleFieldAddType(builder, int(self.field_type))
            fm.SimpleFieldAddValue(builder, table.lookup(field_name))
            offsets.append(fm.SimpleFieldEnd(builder))

        fm.MetricStartSimpleFieldsVector(builder, len(offsets))
        for off in reversed(offsets):
            builder.PrependUOffsetTRelative(off)
        return builder.EndVector()


def _text(value, what: str) -> str:
    if value is None:
        raise RowDecodeError(f"Row has no {what}")
    return value.decode('utf-8')


def decode_row(data: bytes, offset: int = 0) -> Tuple[DecodedRow, int]:
    """
    Decode one size-prefixed Metric row starting at offset

    Returns:
        Tuple of (row, offset just past the row)
    """
    if offset + _SIZE_PREFIX > len(data):
        raise RowDecodeError(f"Missing size prefix at offset {offset}")
    size = util.GetSizePrefix(data, offset)
    end = offset + _SIZE_PREFIX + size
    if size < _SIZE_PREFIX or end > len(data):
        raise RowDecodeError(f"Row of {size} bytes at offset {offset} is truncated")

    row = bytes(data[offset:end])
    try:
        metric = fm.Metric.GetSizePrefixedRootAs(row)
        name = _text(metric.Name(), "metric name")
        tags = []
        for i in range(metric.KeyValuesLength()):
            kv = metric.KeyValues(i)
            tags.append((_text(kv.Key(), "tag key"), _text(kv.Value(), "tag value")))
        fields = []
        for i in range(metric.SimpleFieldsLength()):
            field = metric.SimpleFields(i)
            field_name = _text(field.Name(), "field name")
            try:
                field_type = FieldType(field.Type())
            except ValueError as e:
                raise RowDecodeError(f"Unknown field type {field.Type()} for {field_name!r}") from e
            fields.append((field_name, field_type, field.Value()))
        timestamp = metric.Timestamp()
    except (struct.error, IndexError, TypeError, UnicodeDecodeError) as e:
        raise RowDecodeError(f"Corrupt row at offset {offset}: {e}") from e

    return DecodedRow(name=name, timestamp=timestamp, tags=tags, fields=fields), end


def decode_rows(data: bytes) -> Iterator[DecodedRow]:
    """Iterate over every row in a concatenated batch payload."""
    offset = 0
    while offset < len(data):
        row, offset = decode_row(data, offset)
        yield row
