"""
flatMetricsV1 bindings for the tables in flat_metrics.fbs that rows use

Readers and builder helpers follow the layout flatc emits for Python:
vtable slot N sits at byte offset 4 + 2*N, and each table has
<Table>Start / <Table>Add<Field> / <Table>End functions.
Namespace, hash, exemplars and the compound field are never written;
only their slots are kept so the vtable layout matches the schema.
"""

from flatbuffers.table import Table
from flatbuffers import encode, packer
from flatbuffers import number_types as N

# namespace: flatMetricsV1


class SimpleFieldType(object):
    Unspecified = 0
    DeltaSum = 1
    Min = 2
    Max = 3
    Last = 4
    First = 5
    Gauge = 6


class KeyValue(object):
    __slots__ = ['_tab']

    def Init(self, buf, pos):
        self._tab = Table(buf, pos)

    # KeyValue
    def Key(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(4))
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None

    # KeyValue
    def Value(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(6))
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None


def KeyValueStart(builder):
    builder.StartObject(2)


def KeyValueAddKey(builder, key):
    builder.PrependUOffsetTRelativeSlot(0, N.UOffsetTFlags.py_type(key), 0)


def KeyValueAddValue(builder, value):
    builder.PrependUOffsetTRelativeSlot(1, N.UOffsetTFlags.py_type(value), 0)


def KeyValueEnd(builder):
    return builder.EndObject()


class SimpleField(object):
    __slots__ = ['_tab']

    def Init(self, buf, pos):
        self._tab = Table(buf, pos)

    # SimpleField
    def Name(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(4))
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None

    # SimpleField
    def Type(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(6))
        if o != 0:
            return self._tab.Get(N.Int8Flags, o + self._tab.Pos)
        return 0

    # SimpleField
    def Value(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(8))
        if o != 0:
            return self._tab.Get(N.Float64Flags, o + self._tab.Pos)
        return 0.0


def SimpleFieldStart(builder):
    builder.StartObject(4)


def SimpleFieldAddName(builder, name):
    builder.PrependUOffsetTRelativeSlot(0, N.UOffsetTFlags.py_type(name), 0)


def SimpleFieldAddType(builder, type):
    builder.PrependInt8Slot(1, type, 0)


def SimpleFieldAddValue(builder, value):
    builder.PrependFloat64Slot(2, value, 0.0)


def SimpleFieldEnd(builder):
    return builder.EndObject()


class Metric(object):
    __slots__ = ['_tab']

    @classmethod
    def GetRootAs(cls, buf, offset=0):
        n = encode.Get(packer.uoffset, buf, offset)
        x = Metric()
        x.Init(buf, n + offset)
        return x

    @classmethod
    def GetSizePrefixedRootAs(cls, buf, offset=0):
        return cls.GetRootAs(buf, offset + N.Int32Flags.bytewidth)

    def Init(self, buf, pos):
        self._tab = Table(buf, pos)

    # Metric
    def Name(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(6))
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None

    # Metric
    def Timestamp(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(8))
        if o != 0:
            return self._tab.Get(N.Int64Flags, o + self._tab.Pos)
        return 0

    # Metric
    def KeyValues(self, j):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(10))
        if o != 0:
            x = self._tab.Vector(o)
            x += N.UOffsetTFlags.py_type(j) * 4
            x = self._tab.Indirect(x)
            obj = KeyValue()
            obj.Init(self._tab.Bytes, x)
            return obj
        return None

    # Metric
    def KeyValuesLength(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(10))
        if o != 0:
            return self._tab.VectorLen(o)
        return 0

    # Metric
    def SimpleFields(self, j):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(14))
        if o != 0:
            x = self._tab.Vector(o)
            x += N.UOffsetTFlags.py_type(j) * 4
            x = self._tab.Indirect(x)
            obj = SimpleField()
            obj.Init(self._tab.Bytes, x)
            return obj
        return None

    # Metric
    def SimpleFieldsLength(self):
        o = N.UOffsetTFlags.py_type(self._tab.Offset(14))
        if o != 0:
            return self._tab.VectorLen(o)
        return 0


def MetricStart(builder):
    builder.StartObject(7)


def MetricAddName(builder, name):
    builder.PrependUOffsetTRelativeSlot(1, N.UOffsetTFlags.py_type(name), 0)


def MetricAddTimestamp(builder, timestamp):
    builder.PrependInt64Slot(2, timestamp, 0)


def MetricAddKeyValues(builder, keyValues):
    builder.PrependUOffsetTRelativeSlot(3, N.UOffsetTFlags.py_type(keyValues), 0)


def MetricStartKeyValuesVector(builder, numElems):
    return builder.StartVector(4, numElems, 4)


def MetricAddSimpleFields(builder, simpleFields):
    builder.PrependUOffsetTRelativeSlot(5, N.UOffsetTFlags.py_type(simpleFields), 0)


def MetricStartSimpleFieldsVector(builder, numElems):
    return builder.StartVector(4, numElems, 4)


def MetricEnd(builder):
    return builder.EndObject()
