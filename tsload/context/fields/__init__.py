"""
Field value tables keyed by workload type.
"""

from tsload.context.fields.table import FieldValueTable, parse_field_mapping, DEFAULT_VALUE

__all__ = [
    'FieldValueTable',
    'parse_field_mapping',
    'DEFAULT_VALUE',
]
