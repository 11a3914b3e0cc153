"""
Generator configuration

GeneratorConfig is built once before the pipeline starts and treated as
immutable input afterwards. Values come, lowest precedence first, from the
dataclass defaults, an optional YAML file and the command line.
"""

from dataclasses import dataclass, fields, asdict, replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union, get_args, get_origin

import yaml

from tsload.exceptions import ConfigurationError, ScaleIsZeroError

DEFAULT_TIME_START = "2023-12-13T00:00:00Z"
DEFAULT_TIME_END = "2023-12-16T00:00:00Z"
DEFAULT_URL = "http://localhost:9000/api/v1/write"
DEFAULT_DATABASE = "_internal"
DEFAULT_BATCH_SIZE = 100

USE_CASES = ('devops', 'cpu-only', 'iot')
COMPRESSIONS = ('gzip', 'zstd')
UNSUPPORTED_POLICIES = ('skip', 'abort')


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp; naive values are taken as UTC."""
    try:
        ts = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid timestamp {value!r}: expected RFC3339") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _coerce(name: str, kind: Any, value: Any) -> Any:
    """Convert one config value to the type of its GeneratorConfig field."""
    if get_origin(kind) is Union:
        kind = next(arg for arg in get_args(kind) if arg is not type(None))

    if kind is str:
        # YAML reads unquoted timestamps as date/datetime
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
    elif not isinstance(value, (bool, date)):
        try:
            if kind is int:
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(value)
                return int(value)
            if kind is float:
                return float(value)
        except (TypeError, ValueError):
            pass
    raise ConfigurationError(
        f"invalid value for {name}: expected {kind.__name__}, got {value!r}"
    )


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything one generator instance needs to run."""
    # workload
    use: str = 'devops'
    scale: int = 1
    timestamp_start: str = DEFAULT_TIME_START
    timestamp_end: str = DEFAULT_TIME_END
    seed: int = 0
    log_interval: float = 10.0  # simulated seconds between epochs
    limit: int = 0  # max points, 0 = whole window

    # parallel generation
    interleaved_group_id: int = 0
    interleaved_num_groups: int = 1

    # pipeline
    batch_size: int = DEFAULT_BATCH_SIZE
    compression: str = 'gzip'
    compression_level: Optional[int] = None
    on_unsupported: str = 'skip'

    # destination
    url: str = DEFAULT_URL
    database: str = DEFAULT_DATABASE
    timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_max: float = 30.0
    output: Optional[str] = None  # capture file instead of HTTP

    def start_time(self) -> datetime:
        return parse_timestamp(self.timestamp_start)

    def end_time(self) -> datetime:
        return parse_timestamp(self.timestamp_end)

    def validate(self) -> 'GeneratorConfig':
        """
        Check the configuration before any simulation starts

        Raises:
            ScaleIsZeroError: scale is 0
            ConfigurationError: any other invalid value
        """
        if self.scale == 0:
            raise ScaleIsZeroError()
        if self.scale < 0:
            raise ConfigurationError(f"scale must be positive, got {self.scale}")
        if self.use not in USE_CASES:
            raise ConfigurationError(
                f"unknown use case {self.use!r}; expected one of {', '.join(USE_CASES)}"
            )
        if self.interleaved_num_groups < 1:
            raise ConfigurationError("interleaved num groups must be at least 1")
        if not 0 <= self.interleaved_group_id < self.interleaved_num_groups:
            raise ConfigurationError(
                f"incorrect interleaved groups configuration: id {self.interleaved_group_id} "
                f">= total groups {self.interleaved_num_groups}"
            )
        if self.start_time() >= self.end_time():
            raise ConfigurationError(
                f"timestamp start {self.timestamp_start} must be before end {self.timestamp_end}"
            )
        if self.log_interval <= 0:
            raise ConfigurationError("log interval must be positive")
        if self.limit < 0:
            raise ConfigurationError("limit cannot be negative")
        if self.batch_size < 1:
            raise ConfigurationError("batch size must be at least 1")
        if self.compression not in COMPRESSIONS:
            raise ConfigurationError(
                f"unknown compression {self.compression!r}; expected one of {', '.join(COMPRESSIONS)}"
            )
        if self.on_unsupported not in UNSUPPORTED_POLICIES:
            raise ConfigurationError(
                f"unknown unsupported-data policy {self.on_unsupported!r}; "
                f"expected one of {', '.join(UNSUPPORTED_POLICIES)}"
            )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("max retries cannot be negative")
        return self

    def merged(self, overrides: Dict[str, Any]) -> 'GeneratorConfig':
        """Copy with non-None overrides applied, each coerced to its field type."""
        kinds = {f.name: f.type for f in fields(self)}
        unknown = set(overrides) - set(kinds)
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
        values = {k: _coerce(k, kinds[k], v) for k, v in overrides.items() if v is not None}
        try:
            return replace(self, **values)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Read a YAML config file into a dict of GeneratorConfig fields

    Keys may use dashes or underscores (`batch-size` or `batch_size`).
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            payload = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"fatal error config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"unable to decode config file {path}: {e}") from e

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    return {str(k).replace('-', '_'): v for k, v in payload.items()}


def build_config(path: Optional[Path] = None, **overrides) -> GeneratorConfig:
    """Defaults <- YAML file <- explicit overrides."""
    config = GeneratorConfig()
    if path is not None:
        config = config.merged(load_config_file(path))
    return config.merged(overrides)
