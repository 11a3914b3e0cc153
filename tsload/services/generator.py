"""
DataGenerator: the encode -> batch -> compress -> push pipeline

One generator instance owns its point buffer, row encoder, batch buffer,
compressor and sink, and drives them in lock-step on a single thread:

    simulator.next -> [my interleave turn?] -> encode -> append
                   -> [batch full?] -> compress -> push

Pushing blocks further simulation, which is the pipeline's only flow control.
Several instances can split one logical stream: each is given the same
interleaved_num_groups and a distinct interleaved_group_id, and the interleave
cursor hands every num_groups-th simulator yield to this instance.
"""

import logging
import random
import time
from pathlib import Path
from typing import Optional

from tsload.config import GeneratorConfig
from tsload.context.encoding import RowEncoder
from tsload.context.fields import FieldValueTable
from tsload.context.simulation import new_simulator
from tsload.exceptions import (
    BatchError,
    ConfigurationError,
    UnsupportedDataError,
    ERR_INVALID_DATA_CONFIG,
    ERR_NO_CONFIG,
)
from tsload.models import Point, RunSummary
from tsload.protocols import SimulatorProtocol, SinkProtocol
from tsload.services.batch import BatchAccumulator
from tsload.services.capture import CaptureWriter
from tsload.services.compressor import BatchCompressor
from tsload.services.transport import HTTPPusher

logger = logging.getLogger(__name__)


def build_sink(config: GeneratorConfig) -> SinkProtocol:
    """HTTP pusher, or a capture writer when config.output is set."""
    if config.output:
        return CaptureWriter(Path(config.output))
    return HTTPPusher(
        config.url,
        config.database,
        timeout=config.timeout,
        max_retries=config.max_retries,
        backoff_base=config.backoff_base,
        backoff_max=config.backoff_max,
    )


class DataGenerator:
    """
    Pipeline driver

    Collaborators default to what the config asks for; tests inject their
    own table, compressor or sink.

    Example:
        summary = DataGenerator().generate(GeneratorConfig(scale=2, limit=1000))
    """

    def __init__(
        self,
        *,
        table: Optional[FieldValueTable] = None,
        compressor: Optional[BatchCompressor] = None,
        sink: Optional[SinkProtocol] = None,
        encoder: Optional[RowEncoder] = None,
    ):
        self.config: Optional[GeneratorConfig] = None
        self._given_table = table
        self._given_compressor = compressor
        self.table = table
        self.compressor = compressor
        self.sink = sink
        self.encoder = encoder or RowEncoder()
        self.accumulator: Optional[BatchAccumulator] = None
        self.summary = RunSummary()

    def init(self, config) -> GeneratorConfig:
        """
        Validate the config and build missing collaborators

        Nothing touches the network here; configuration errors surface
        before any simulation or push.
        """
        if config is None:
            raise ConfigurationError(ERR_NO_CONFIG)
        if not isinstance(config, GeneratorConfig):
            raise ConfigurationError(ERR_INVALID_DATA_CONFIG)
        self.config = config.validate()

        self.table = self._given_table
        if self.table is None:
            self.table = FieldValueTable.for_use_case(config.use)
        self.compressor = self._given_compressor
        if self.compressor is None:
            self.compressor = BatchCompressor(config.compression, config.compression_level)
        self.accumulator = BatchAccumulator(config.batch_size)
        self.summary = RunSummary()
        return self.config

    def generate(self, config) -> RunSummary:
        """Validate config, build the simulator and run it to completion."""
        config = self.init(config)
        sim = new_simulator(config, random.Random(config.seed))
        logger.info(
            "generating %s workload: scale=%d, window=%s..%s, interval=%ss, limit=%d, group %d/%d",
            config.use, config.scale, config.timestamp_start, config.timestamp_end,
            config.log_interval, config.limit,
            config.interleaved_group_id, config.interleaved_num_groups,
        )
        if self.sink is not None:
            return self.run(sim)

        # a sink built here lives for this call only
        self.sink = build_sink(config)
        try:
            return self.run(sim)
        finally:
            self.sink.close()
            self.sink = None

    def run(self, sim: SimulatorProtocol) -> RunSummary:
        """
        Drain a simulator through the pipeline

        The interleave cursor advances once per simulator yield, whether or
        not the simulator marked the point as written. After finished() a
        single terminal flush sends any partial batch.
        """
        if self.config is None:
            raise ConfigurationError(ERR_NO_CONFIG)

        group_id = self.config.interleaved_group_id
        num_groups = self.config.interleaved_num_groups
        abort_on_unsupported = self.config.on_unsupported == 'abort'
        summary = self.summary
        started = time.monotonic()

        cursor = 0
        point = Point()
        try:
            while not sim.finished():
                write = sim.next(point)
                summary.yields += 1

                if write and cursor == group_id:
                    summary.attributed += 1
                    try:
                        self.write_point(point)
                    except UnsupportedDataError as e:
                        if abort_on_unsupported:
                            logger.error("aborting on unsupported data after %d rows: %s",
                                         summary.rows_written, e)
                            raise
                        summary.record_skip(e.reason)
                        logger.debug("skipped point: %s", e)
                point.reset()
                cursor = (cursor + 1) % num_groups

                if self.accumulator.should_flush():
                    self.flush()

            self.flush()
        finally:
            summary.elapsed = time.monotonic() - started

        if summary.skipped_count:
            logger.warning("skipped %d unsupported points: %s", summary.skipped_count, summary.skipped)
        logger.info(
            "run complete: %d rows in %d batches, %d -> %d bytes, %.1f rows/s",
            summary.rows_written, summary.batches_sent, summary.raw_bytes,
            summary.compressed_bytes, summary.rows_per_second,
        )
        return summary

    def write_point(self, point: Point):
        row = self.encoder.encode(point, self.table)
        self.accumulator.append(row)
        self.summary.rows_written += 1

    def flush(self):
        """Compress and push whatever is buffered; no-op when empty."""
        batch = self.accumulator.flush()
        if batch is None:
            return

        try:
            compressed = self.compressor.compress_batch(batch)
            self.sink.push(compressed)
        except BatchError as e:
            logger.error("batch %d lost (%d rows): %s", e.batch_index, e.row_count, e)
            raise
        finally:
            self.summary.retries = getattr(self.sink, 'retries', 0)

        self.summary.batches_sent += 1
        self.summary.raw_bytes += compressed.raw_size
        self.summary.compressed_bytes += compressed.size
        logger.debug("batch %d sent: %d rows, %d -> %d bytes",
                     batch.index, batch.row_count, compressed.raw_size, compressed.size)
