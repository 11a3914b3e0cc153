"""
Field value tables: static field name -> value mappings per workload

The generator never sends the values a simulator computes. Every field is
written with the value its name maps to here, so a run's payload depends
only on the simulated tag/field shape and timestamps.

Resource format is one `name,value` record per line. Lines that do not split
into exactly two comma-separated columns are ignored; a value that is not a
float is a packaging error and fails the load.
"""

from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import Dict, Mapping

from tsload.exceptions import FieldTableError

DEFAULT_VALUE = 0.0

# cpu-only emits the cpu measurement of devops, so it shares its table
_RESOURCES = {
    'devops': 'devops.csv',
    'cpu-only': 'devops.csv',
    'iot': 'iot.csv',
}


def parse_field_mapping(text: str) -> Dict[str, float]:
    """
    Parse a `name,value` table

    Args:
        text: Whole resource contents

    Returns:
        Dict of field name to value

    Raises:
        FieldTableError: a two-column line has a non-float value
    """
    result: Dict[str, float] = {}
    for lineno, row in enumerate(text.split('\n'), start=1):
        columns = row.strip().split(',')
        if len(columns) != 2:
            continue
        name, raw = columns
        try:
            result[name] = float(raw)
        except ValueError as e:
            raise FieldTableError(f"line {lineno}: invalid value {raw!r} for field {name!r}") from e
    return result


class FieldValueTable:
    """Read-only field value lookup"""

    def __init__(self, mapping: Mapping[str, float], default: float = DEFAULT_VALUE):
        self._mapping = MappingProxyType(dict(mapping))
        self.default = default

    @classmethod
    def parse(cls, text: str) -> 'FieldValueTable':
        return cls(parse_field_mapping(text))

    @classmethod
    def for_use_case(cls, use_case: str) -> 'FieldValueTable':
        """Packaged table for a workload, built once per workload type."""
        return _load_packaged(use_case)

    @staticmethod
    def use_cases():
        return sorted(_RESOURCES)

    def lookup(self, name: str) -> float:
        return self._mapping.get(name, self.default)

    def __contains__(self, name: str) -> bool:
        return name in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self):
        return f"FieldValueTable({len(self._mapping)} fields)"


@lru_cache(maxsize=None)
def _load_packaged(use_case: str) -> FieldValueTable:
    resource = _RESOURCES.get(use_case)
    if resource is None:
        raise FieldTableError(
            f"no field table for use case {use_case!r}; expected one of {', '.join(sorted(_RESOURCES))}"
        )
    text = resources.files('tsload.context.fields').joinpath('data', resource).read_text(encoding='utf-8')
    return FieldValueTable.parse(text)
