"""
Unit tests for generator configuration
"""

import pytest
from datetime import datetime, timezone

from tsload.config import GeneratorConfig, build_config, load_config_file, parse_timestamp
from tsload.exceptions import ConfigurationError, ScaleIsZeroError


class TestValidation:
    """Test GeneratorConfig.validate"""

    def test_defaults_are_valid(self):
        config = GeneratorConfig().validate()

        assert config.use == 'devops'
        assert config.batch_size == 100
        assert config.start_time() == datetime(2023, 12, 13, tzinfo=timezone.utc)
        assert config.end_time() == datetime(2023, 12, 16, tzinfo=timezone.utc)

    def test_zero_scale_is_typed_error(self):
        with pytest.raises(ScaleIsZeroError, match="scale cannot be 0"):
            GeneratorConfig(scale=0).validate()

    @pytest.mark.parametrize("overrides,message", [
        ({'scale': -1}, "scale must be positive"),
        ({'use': 'weather'}, "unknown use case"),
        ({'interleaved_group_id': 3, 'interleaved_num_groups': 3}, "id 3 >= total groups 3"),
        ({'interleaved_num_groups': 0}, "at least 1"),
        ({'timestamp_start': '2023-12-16T00:00:00Z'}, "must be before end"),
        ({'timestamp_end': 'yesterday'}, "invalid timestamp"),
        ({'log_interval': 0}, "log interval"),
        ({'limit': -5}, "limit"),
        ({'batch_size': 0}, "batch size"),
        ({'compression': 'lz4'}, "unknown compression"),
        ({'on_unsupported': 'ignore'}, "unsupported-data policy"),
        ({'timeout': 0}, "timeout"),
        ({'max_retries': -1}, "max retries"),
    ])
    def test_invalid_values(self, overrides, message):
        with pytest.raises(ConfigurationError, match=message):
            GeneratorConfig(**overrides).validate()

    def test_config_is_immutable(self):
        config = GeneratorConfig()
        with pytest.raises(Exception):
            config.scale = 5


class TestParseTimestamp:

    def test_rfc3339_with_z(self):
        assert parse_timestamp('2023-12-13T00:00:01Z') == datetime(2023, 12, 13, 0, 0, 1, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp('2023-12-13T00:00:00').tzinfo == timezone.utc


class TestConfigSources:
    """Test YAML file and override merging"""

    def test_yaml_file_values(self, tmp_path):
        path = tmp_path / "tsload.yaml"
        path.write_text("use: iot\nscale: 20\nbatch-size: 50\ninterleaved_num_groups: 4\n")

        config = build_config(path)

        assert config.use == 'iot'
        assert config.scale == 20
        assert config.batch_size == 50
        assert config.interleaved_num_groups == 4

    def test_overrides_win_over_file(self, tmp_path):
        path = tmp_path / "tsload.yaml"
        path.write_text("scale: 20\nseed: 7\n")

        config = build_config(path, scale=3, seed=None)

        assert config.scale == 3
        assert config.seed == 7

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config_file(path) == {}

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "tsload.yaml"
        path.write_text("scael: 2\n")

        with pytest.raises(ConfigurationError, match="scael"):
            build_config(path)

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("scale: [1, 2\n")

        with pytest.raises(ConfigurationError, match="unable to decode"):
            load_config_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config_file(tmp_path / "nope.yaml")


class TestValueCoercion:
    """Test that file values are converted to the field types"""

    def test_unquoted_yaml_timestamps(self, tmp_path):
        path = tmp_path / "tsload.yaml"
        path.write_text("timestamp-start: 2023-12-13T00:00:00Z\ntimestamp-end: 2023-12-14\n")

        config = build_config(path).validate()

        assert config.start_time() == datetime(2023, 12, 13, tzinfo=timezone.utc)
        assert config.end_time() == datetime(2023, 12, 14, tzinfo=timezone.utc)

    def test_numeric_strings_are_converted(self, tmp_path):
        path = tmp_path / "tsload.yaml"
        path.write_text("scale: '2'\nlog-interval: 5\ncompression-level: '9'\n")

        config = build_config(path).validate()

        assert config.scale == 2
        assert isinstance(config.log_interval, float)
        assert config.log_interval == 5.0
        assert config.compression_level == 9

    @pytest.mark.parametrize("text,key", [
        ("scale: two\n", "scale"),
        ("scale: true\n", "scale"),
        ("seed: 1.5\n", "seed"),
        ("timeout: [30]\n", "timeout"),
        ("use: {name: iot}\n", "use"),
    ])
    def test_bad_values_are_configuration_errors(self, tmp_path, text, key):
        path = tmp_path / "tsload.yaml"
        path.write_text(text)

        with pytest.raises(ConfigurationError, match=f"invalid value for {key}"):
            build_config(path)

    def test_merged_keeps_defaults_for_none(self):
        config = GeneratorConfig().merged({'scale': None, 'batch_size': '50'})

        assert config.scale == 1
        assert config.batch_size == 50
