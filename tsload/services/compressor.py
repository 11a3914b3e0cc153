"""
Batch compression

One compressor instance lives for the whole run and compresses one batch at
a time. gzip output goes through a reused in-memory buffer with a fixed
mtime, so the same batch always compresses to the same bytes; zstd reuses a
single compression context.
"""

import gzip
import io
from typing import Optional

import zstandard as zstd

from tsload.exceptions import CompressionError
from tsload.models import Batch, CompressedBatch
from tsload.protocols import CompressorProtocol

DEFAULT_LEVELS = {
    'gzip': 6,
    'zstd': 3,
}


class BatchCompressor(CompressorProtocol):
    """Compress batch payloads with gzip or zstd"""

    def __init__(self, encoding: str = 'gzip', level: Optional[int] = None):
        if encoding not in DEFAULT_LEVELS:
            raise ValueError(f"unsupported compression {encoding!r}")
        self._encoding = encoding
        self._level = DEFAULT_LEVELS[encoding] if level is None else level
        self._out = io.BytesIO()
        self._zstd_c: Optional[zstd.ZstdCompressor] = None
        self._zstd_d: Optional[zstd.ZstdDecompressor] = None
        if encoding == 'zstd':
            self._zstd_c = zstd.ZstdCompressor(level=self._level, write_content_size=True)
            self._zstd_d = zstd.ZstdDecompressor()

    @property
    def content_encoding(self) -> str:
        return self._encoding

    @property
    def level(self) -> int:
        return self._level

    def compress(self, data: bytes) -> bytes:
        # always start from an empty buffer, even after a failed cycle
        self._out.seek(0)
        self._out.truncate()

        if self._zstd_c is not None:
            return self._zstd_c.compress(data)

        with gzip.GzipFile(fileobj=self._out, mode='wb', compresslevel=self._level, mtime=0) as gz:
            gz.write(data)
        return self._out.getvalue()

    def decompress(self, data: bytes) -> bytes:
        if self._zstd_d is not None:
            return self._zstd_d.decompress(data)
        return gzip.decompress(data)

    def compress_batch(self, batch: Batch) -> CompressedBatch:
        """
        Compress a flushed batch

        Raises:
            CompressionError: the stream could not be written or finalized;
                nothing from this batch may be sent
        """
        try:
            payload = self.compress(batch.payload)
        except (OSError, ValueError, zstd.ZstdError) as e:
            raise CompressionError(
                f"{self._encoding} compression failed: {e}", batch.index, batch.row_count
            ) from e
        return CompressedBatch(
            index=batch.index,
            payload=payload,
            row_count=batch.row_count,
            raw_size=batch.size,
            content_encoding=self._encoding,
        )
