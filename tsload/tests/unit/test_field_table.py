"""
Unit tests for field value tables
"""

import pytest

from tsload.context.fields import FieldValueTable, parse_field_mapping, DEFAULT_VALUE
from tsload.context.simulation import DEVOPS_MEASUREMENTS, IOT_MEASUREMENTS
from tsload.exceptions import ConfigurationError, FieldTableError


class TestParseFieldMapping:
    """Test the name,value resource parser"""

    def test_parses_two_column_rows(self):
        mapping = parse_field_mapping("usage_user,12.5\nusage_system,3\n")

        assert mapping == {'usage_user': 12.5, 'usage_system': 3.0}

    def test_skips_rows_without_exactly_two_columns(self):
        text = "usage_user,12.5\n\nheader only\na,b,c\nusage_idle,1e2"

        mapping = parse_field_mapping(text)

        assert mapping == {'usage_user': 12.5, 'usage_idle': 100.0}

    def test_non_float_value_is_fatal(self):
        with pytest.raises(FieldTableError, match="usage_user"):
            parse_field_mapping("usage_user,lots\n")

    def test_field_table_error_is_configuration_error(self):
        assert issubclass(FieldTableError, ConfigurationError)


class TestFieldValueTable:
    """Test lookups and packaged tables"""

    def test_missing_field_resolves_to_default(self, field_table):
        assert field_table.lookup('no_such_field') == 0.0
        assert DEFAULT_VALUE == 0.0

    def test_lookup_known_field(self, field_table):
        assert field_table.lookup('usage_user') == 12.5
        assert 'usage_user' in field_table
        assert len(field_table) == 2

    def test_table_is_read_only(self):
        source = {'usage_user': 1.0}
        table = FieldValueTable(source)
        source['usage_user'] = 2.0

        assert table.lookup('usage_user') == 1.0
        with pytest.raises(TypeError):
            table._mapping['usage_user'] = 3.0

    def test_packaged_devops_table_covers_every_devops_field(self):
        table = FieldValueTable.for_use_case('devops')

        for fields in DEVOPS_MEASUREMENTS.values():
            for name in fields:
                assert name in table, name

    def test_packaged_iot_table_covers_every_iot_field(self):
        table = FieldValueTable.for_use_case('iot')

        for fields in IOT_MEASUREMENTS.values():
            for name in fields:
                assert name in table, name

    def test_packaged_table_is_built_once(self):
        assert FieldValueTable.for_use_case('devops') is FieldValueTable.for_use_case('devops')

    def test_cpu_only_shares_devops_values(self):
        cpu_only = FieldValueTable.for_use_case('cpu-only')
        devops = FieldValueTable.for_use_case('devops')

        assert cpu_only.lookup('usage_user') == devops.lookup('usage_user')

    def test_unknown_use_case(self):
        with pytest.raises(FieldTableError, match="unknown-workload"):
            FieldValueTable.for_use_case('unknown-workload')
