"""
Encoding context: flatMetricsV1 rows.
"""

from tsload.context.encoding.row import RowEncoder, decode_row, decode_rows

__all__ = [
    'RowEncoder',
    'decode_row',
    'decode_rows',
]
