"""
Exception hierarchy for tsload.

Every error raised by the pipeline derives from TsloadError so the CLI can
report it uniformly:
- ConfigurationError: bad or missing startup configuration (pipeline never runs)
- UnsupportedDataError: a point that cannot be represented as a row
- CompressionError / TransportError: fatal for the batch being flushed
"""

from typing import Optional

__all__ = [
    'TsloadError',
    'ConfigurationError',
    'ScaleIsZeroError',
    'FieldTableError',
    'UnsupportedDataError',
    'UnsupportedTagTypeError',
    'RowDecodeError',
    'BatchError',
    'CompressionError',
    'TransportError',
    'CaptureError',
    'ERR_NO_CONFIG',
    'ERR_INVALID_DATA_CONFIG',
    'ERR_SCALE_IS_ZERO',
]

ERR_NO_CONFIG = "no GeneratorConfig provided"
ERR_INVALID_DATA_CONFIG = "invalid config: DataGenerator needs a GeneratorConfig"
ERR_SCALE_IS_ZERO = "scale cannot be 0"


class TsloadError(Exception):
    """Base class for all tsload errors."""


class ConfigurationError(TsloadError):
    """Startup configuration is missing or malformed."""


class ScaleIsZeroError(ConfigurationError):
    def __init__(self, message: str = ERR_SCALE_IS_ZERO):
        super().__init__(message)


class FieldTableError(ConfigurationError):
    """A packaged field value table could not be parsed."""


class UnsupportedDataError(TsloadError):
    """A point carries data the row format cannot represent."""

    reason = "unsupported_data"


class UnsupportedTagTypeError(UnsupportedDataError):
    """A tag value is neither a string nor None."""

    reason = "unsupported_tag_type"

    def __init__(self, measurement: str, key: str, value_type: type):
        self.measurement = measurement
        self.key = key
        self.value_type = value_type
        super().__init__(
            f"non-string tags not supported: {measurement}.{key} "
            f"has value of type {value_type.__name__}"
        )


class RowDecodeError(TsloadError):
    """Encoded row bytes are truncated or malformed."""


class BatchError(TsloadError):
    """An error tied to one flushed batch; records what was lost."""

    def __init__(self, message: str, batch_index: int, row_count: int):
        self.batch_index = batch_index
        self.row_count = row_count
        super().__init__(f"{message} (batch {batch_index}, {row_count} rows lost)")


class CompressionError(BatchError):
    """Compressing a batch failed; the batch is never sent."""


class TransportError(BatchError):
    """Pushing a batch to the write endpoint failed."""

    def __init__(
        self,
        message: str,
        batch_index: int,
        row_count: int,
        *,
        kind: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
        attempts: int = 1,
    ):
        self.kind = kind
        self.status_code = status_code
        self.retryable = retryable
        self.attempts = attempts
        super().__init__(message, batch_index, row_count)


class CaptureError(TsloadError):
    """A capture file could not be written or read."""
