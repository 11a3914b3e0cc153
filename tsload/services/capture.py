"""
Capture files: compressed batches stored with msgpack

A capture holds exactly what would have gone over the wire, one record per
batch, so a workload can be generated once and loaded into a database later
(or several times) without re-running the simulator.

File layout is a stream of msgpack maps:
    {'format': 'tsload-capture', 'version': 1}
    {'index': int, 'rows': int, 'raw_size': int, 'encoding': str, 'payload': bytes}*
"""

import logging
import time
from pathlib import Path
from typing import Iterator, Optional

import msgpack

from tsload.exceptions import CaptureError, TsloadError
from tsload.models import CompressedBatch, PushResult, RunSummary
from tsload.protocols import SinkProtocol

logger = logging.getLogger(__name__)

CAPTURE_FORMAT = 'tsload-capture'
CAPTURE_VERSION = 1


class CaptureWriter(SinkProtocol):
    """Sink that appends batches to a capture file instead of pushing them"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file = open(self.path, 'wb')
        except OSError as e:
            raise CaptureError(f"cannot open capture file {self.path}: {e}") from e
        self._packer = msgpack.Packer(use_bin_type=True)
        self._write({'format': CAPTURE_FORMAT, 'version': CAPTURE_VERSION})

    def _write(self, record: dict):
        try:
            self._file.write(self._packer.pack(record))
        except OSError as e:
            raise CaptureError(f"cannot write capture file {self.path}: {e}") from e

    def push(self, batch: CompressedBatch) -> PushResult:
        started = time.monotonic()
        self._write({
            'index': batch.index,
            'rows': batch.row_count,
            'raw_size': batch.raw_size,
            'encoding': batch.content_encoding,
            'payload': batch.payload,
        })
        return PushResult(batch_index=batch.index, elapsed=time.monotonic() - started)

    def close(self):
        if not self._file.closed:
            self._file.close()


def read_capture(path: Path) -> Iterator[CompressedBatch]:
    """
    Iterate over the batches of a capture file

    Raises:
        CaptureError: missing file, bad header or corrupt record
    """
    path = Path(path)
    try:
        f = open(path, 'rb')
    except OSError as e:
        raise CaptureError(f"cannot open capture file {path}: {e}") from e

    with f:
        unpacker = msgpack.Unpacker(f, raw=False)
        try:
            header = next(unpacker, None)
            if not isinstance(header, dict) or header.get('format') != CAPTURE_FORMAT:
                raise CaptureError(f"{path} is not a tsload capture file")
            if header.get('version') != CAPTURE_VERSION:
                raise CaptureError(f"unsupported capture version {header.get('version')!r} in {path}")

            for record in unpacker:
                try:
                    yield CompressedBatch(
                        index=record['index'],
                        payload=record['payload'],
                        row_count=record['rows'],
                        raw_size=record['raw_size'],
                        content_encoding=record['encoding'],
                    )
                except (KeyError, TypeError) as e:
                    raise CaptureError(f"corrupt batch record in {path}: {e}") from e
        except (msgpack.ExtraData, msgpack.FormatError, msgpack.StackError, ValueError) as e:
            raise CaptureError(f"corrupt capture file {path}: {e}") from e


def replay_capture(path: Path, sink: SinkProtocol, limit: Optional[int] = None) -> RunSummary:
    """
    Push the batches of a capture file through a sink, in order

    Args:
        path: Capture file
        sink: Destination, usually an HTTPPusher
        limit: Stop after this many batches

    Returns:
        Summary with batches, rows and bytes sent
    """
    summary = RunSummary()
    started = time.monotonic()
    try:
        for batch in read_capture(path):
            if limit is not None and summary.batches_sent >= limit:
                break
            try:
                sink.push(batch)
            except TsloadError as e:
                logger.error("replay stopped at batch %d (%d rows): %s", batch.index, batch.row_count, e)
                raise
            summary.batches_sent += 1
            summary.rows_written += batch.row_count
            summary.raw_bytes += batch.raw_size
            summary.compressed_bytes += batch.size
    finally:
        summary.retries = getattr(sink, 'retries', 0)
        summary.elapsed = time.monotonic() - started
    return summary
