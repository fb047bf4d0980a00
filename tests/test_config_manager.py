"""
Tests for configuration loading and validation.
"""

import sys
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from tabdiff.config.manager import (
    ComparisonConfig,
    ConfigError,
    ConfigManager,
    create_sample_config,
)


class TestComparisonConfig:
    """Validation of the configuration dataclass."""

    def test_defaults(self):
        config = ComparisonConfig(file1="a.xlsx", file2="b.xlsx")
        assert config.all_tables
        assert config.uniqueness_threshold == 0.95
        assert config.composite_key_widths == (2, 3)
        assert config.file1_label == "Old Version"
        assert config.header_row("Anything") == 0
        assert config.key_override("Anything") is None

    def test_files_required(self):
        with pytest.raises(ConfigError):
            ComparisonConfig(file1="", file2="b.xlsx")
        with pytest.raises(ConfigError):
            ComparisonConfig(file1="a.xlsx", file2="")

    @pytest.mark.parametrize("threshold", [0, -0.5, 1.5])
    def test_threshold_range(self, threshold):
        with pytest.raises(ConfigError):
            ComparisonConfig(file1="a", file2="b", uniqueness_threshold=threshold)

    def test_composite_widths_at_least_two(self):
        with pytest.raises(ConfigError):
            ComparisonConfig(file1="a", file2="b", composite_key_widths=(1, 2))

    def test_negative_header_row(self):
        with pytest.raises(ConfigError):
            ComparisonConfig(file1="a", file2="b", header_rows={"T": -1})

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestConfigManager:
    """Loading and saving YAML configuration."""

    def test_from_dict(self):
        config = ConfigManager.from_dict({
            "file1": "old.xlsx",
            "file2": "new.xlsx",
            "tables": ["Customers", "Orders"],
            "key_columns": {"Orders": ["Order Date", "Region"]},
            "header_rows": {"Orders": 2},
            "uniqueness_threshold": 0.9,
            "composite_key_widths": [2],
        })

        assert config.tables == ["Customers", "Orders"]
        assert not config.all_tables
        assert config.key_override("Orders") == ["Order Date", "Region"]
        assert config.header_row("Orders") == 2
        assert config.uniqueness_threshold == 0.9
        assert config.composite_key_widths == (2,)

    @pytest.mark.parametrize("tables", ["all", "ALL", None, []])
    def test_all_tables(self, tables):
        config = ConfigManager.from_dict({"file1": "a", "file2": "b", "tables": tables})
        assert config.all_tables

    def test_single_table_string(self):
        config = ConfigManager.from_dict({"file1": "a", "file2": "b", "tables": "Customers"})
        assert config.tables == ["Customers"]

    def test_bad_tables_value(self):
        with pytest.raises(ConfigError):
            ConfigManager.from_dict({"file1": "a", "file2": "b", "tables": 5})

    def test_bad_threshold_type(self):
        with pytest.raises(ConfigError):
            ConfigManager.from_dict({"file1": "a", "file2": "b", "uniqueness_threshold": "high"})

    def test_load(self, tmp_path):
        path = tmp_path / "tabdiff.yaml"
        path.write_text(
            "file1: old.xlsx\nfile2: new.xlsx\nfile1_label: Jan\ntables: all\n",
            encoding="utf-8",
        )

        manager = ConfigManager(path)
        config = manager.load()

        assert config.file1_label == "Jan"
        assert config.all_tables
        assert manager.comparison is config
        assert manager.config["file2"] == "new.xlsx"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "missing.yaml").load()

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("file1: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            ConfigManager(path).load()

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            ConfigManager(path).load()

    def test_save_round_trip(self, tmp_path):
        manager = ConfigManager()
        manager.comparison = ConfigManager.from_dict({
            "file1": "old.xlsx",
            "file2": "new.xlsx",
            "tables": ["Orders"],
            "key_columns": {"Orders": "order_id"},
        })

        path = tmp_path / "saved.yaml"
        manager.save(path)
        reloaded = ConfigManager(path).load()

        assert reloaded == manager.comparison

    def test_save_without_config(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigManager().save(tmp_path / "x.yaml")

    def test_sample_config_loads(self, tmp_path):
        path = create_sample_config(tmp_path / "sample.yaml")
        config = ConfigManager(path).load()
        assert config.tables == ["Sample Orders"]
        assert config.key_override("Sample Orders") == ["orderdate", "region", "rep", "item"]
