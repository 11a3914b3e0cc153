"""
tsload - Synthetic Time-Series Load Generator

Drives a simulated workload into a time-series database: points are encoded
into binary rows, batched, compressed and pushed to an HTTP write endpoint.

Layers:
- Models: Pure data structures (Point, Batch, RunSummary)
- Protocols: Interface contracts (SimulatorProtocol, SinkProtocol)
- Context: Domain implementations (field tables, row encoding, simulators)
- Services: Pipeline orchestration (DataGenerator, compressor, transport)
- CLI: User interface (generate, load, inspect commands)
"""

__version__ = "1.0.0"
__license__ = "MIT"

from tsload import models, protocols
from tsload.config import GeneratorConfig
from tsload.context import FieldValueTable, RowEncoder, decode_rows, new_simulator
from tsload.services import DataGenerator, BatchAccumulator, BatchCompressor, HTTPPusher

__all__ = [
    'models',
    'protocols',
    'GeneratorConfig',
    'FieldValueTable',
    'RowEncoder',
    'decode_rows',
    'new_simulator',
    'DataGenerator',
    'BatchAccumulator',
    'BatchCompressor',
    'HTTPPusher',
]
