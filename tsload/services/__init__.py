"""
Services layer - pipeline orchestration.
"""

from tsload.services.batch import BatchAccumulator
from tsload.services.compressor import BatchCompressor
from tsload.services.transport import HTTPPusher
from tsload.services.capture import CaptureWriter, read_capture, replay_capture
from tsload.services.generator import DataGenerator, build_sink

# Provide consistent naming
Generator = DataGenerator
Pusher = HTTPPusher

__all__ = [
    'BatchAccumulator',
    'BatchCompressor',
    'HTTPPusher',
    'CaptureWriter',
    'read_capture',
    'replay_capture',
    'DataGenerator',
    'build_sink',
    # Aliases
    'Generator',
    'Pusher',
]
