"""
Context layer - domain-specific implementations.
"""

from tsload.context.fields import FieldValueTable
from tsload.context.encoding import RowEncoder, decode_rows
from tsload.context.simulation import new_simulator

__all__ = [
    'FieldValueTable',
    'RowEncoder',
    'decode_rows',
    'new_simulator',
]
