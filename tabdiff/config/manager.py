"""
Configuration management.
Single responsibility: load, validate, and manage configuration.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, Union
from dataclasses import dataclass, field

from ..core.key_selector import DEFAULT_COMPOSITE_WIDTHS, DEFAULT_UNIQUENESS_THRESHOLD
from ..utils.logger import get_logger


logger = get_logger()


ALL_TABLES = "all"


class ConfigError(ValueError):
    """Raised when the configuration file is structurally or semantically invalid."""
    pass


@dataclass
class ComparisonConfig:
    """Configuration for comparing two versions of a workbook."""

    file1: str
    file2: str
    file1_label: str = "Old Version"
    file2_label: str = "New Version"
    tables: Optional[List[str]] = None  # None means every table of file1
    key_columns: Dict[str, Union[str, List[str]]] = field(default_factory=dict)
    header_rows: Dict[str, int] = field(default_factory=dict)
    output: Optional[str] = None
    uniqueness_threshold: float = DEFAULT_UNIQUENESS_THRESHOLD
    composite_key_widths: Tuple[int, ...] = DEFAULT_COMPOSITE_WIDTHS

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.file1:
            raise ConfigError("file1 (old version) is required")
        if not self.file2:
            raise ConfigError("file2 (new version) is required")
        if not 0 < self.uniqueness_threshold <= 1:
            raise ConfigError(
                f"uniqueness_threshold must be in (0, 1], got {self.uniqueness_threshold}")
        self.composite_key_widths = tuple(int(w) for w in self.composite_key_widths)
        if any(w < 2 for w in self.composite_key_widths):
            raise ConfigError(
                f"composite_key_widths must all be >= 2, got {list(self.composite_key_widths)}")
        for table, offset in self.header_rows.items():
            if not isinstance(offset, int) or offset < 0:
                raise ConfigError(f"header_rows[{table!r}] must be a non-negative integer")

    @property
    def all_tables(self) -> bool:
        return not self.tables

    def key_override(self, table: str) -> Optional[Union[str, List[str]]]:
        """Configured key column(s) for a table, if any."""
        return self.key_columns.get(table)

    def header_row(self, table: str) -> int:
        """Header row offset for a table (0 when not configured)."""
        return self.header_rows.get(table, 0)


def _parse_tables(raw: Any) -> Optional[List[str]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return None if raw.strip().lower() == ALL_TABLES else [raw]
    if isinstance(raw, list):
        return [str(t) for t in raw] or None
    raise ConfigError(f"tables must be a list of names or '{ALL_TABLES}', got {raw!r}")


class ConfigManager:
    """
    Manage application configuration.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else Path("tabdiff.yaml")
        self.config: Dict[str, Any] = {}
        self.comparison: Optional[ComparisonConfig] = None

    def load(self) -> ComparisonConfig:
        """
        Load configuration from file.

        Returns:
            Parsed comparison configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config is invalid YAML
            ConfigError: If config values are invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        logger.info("config.loading", file=str(self.config_path))

        with open(self.config_path, encoding="utf-8") as f:
            self.config = yaml.safe_load(f) or {}

        if not isinstance(self.config, dict):
            raise ConfigError(f"Config root must be a mapping: {self.config_path}")

        self.comparison = self.from_dict(self.config)

        logger.info("config.loaded",
                    file1=self.comparison.file1,
                    file2=self.comparison.file2,
                    tables=self.comparison.tables or ALL_TABLES)

        return self.comparison

    @staticmethod
    def from_dict(cfg: Dict[str, Any]) -> ComparisonConfig:
        """
        Build a comparison configuration from a plain dictionary.

        Args:
            cfg: Parsed YAML mapping

        Returns:
            Comparison configuration
        """
        try:
            return ComparisonConfig(
                file1=cfg.get("file1", ""),
                file2=cfg.get("file2", ""),
                file1_label=cfg.get("file1_label", "Old Version"),
                file2_label=cfg.get("file2_label", "New Version"),
                tables=_parse_tables(cfg.get("tables")),
                key_columns={str(k): v for k, v in (cfg.get("key_columns") or {}).items()},
                header_rows={str(k): v for k, v in (cfg.get("header_rows") or {}).items()},
                output=cfg.get("output"),
                uniqueness_threshold=float(
                    cfg.get("uniqueness_threshold", DEFAULT_UNIQUENESS_THRESHOLD)),
                composite_key_widths=tuple(
                    cfg.get("composite_key_widths", DEFAULT_COMPOSITE_WIDTHS)),
            )
        except ConfigError as e:
            logger.error("config.invalid", error=str(e))
            raise
        except (TypeError, ValueError) as e:
            logger.error("config.invalid", error=str(e))
            raise ConfigError(f"Invalid configuration: {e}") from e

    def save(self, path: Optional[Path] = None):
        """
        Save configuration to file.

        Args:
            path: Output path (uses original path if not specified)
        """
        if self.comparison is None:
            raise ConfigError("Nothing to save: no configuration loaded")

        output_path = Path(path) if path else self.config_path
        cfg = self.comparison

        logger.info("config.saving", file=str(output_path))

        config_dict = {
            "file1": cfg.file1,
            "file2": cfg.file2,
            "file1_label": cfg.file1_label,
            "file2_label": cfg.file2_label,
            "tables": cfg.tables if cfg.tables else ALL_TABLES,
            "key_columns": cfg.key_columns,
            "header_rows": cfg.header_rows,
            "uniqueness_threshold": cfg.uniqueness_threshold,
            "composite_key_widths": list(cfg.composite_key_widths),
        }
        if cfg.output:
            config_dict["output"] = cfg.output

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info("config.saved", file=str(output_path))


SAMPLE_CONFIG = """# tabdiff configuration
# =====================

# Old and new versions of the same workbook (.xlsx, .xls, .csv, .parquet)
file1: "data/SampleData.xlsx"
file2: "data/SampleData1.xlsx"
file1_label: "Old Version"
file2_label: "New Version"

# Tables (sheets) to compare; "all" compares every sheet of file1
tables:
  - "Sample Orders"

# Optional key override per table; leave out for auto-detection
key_columns:
  "Sample Orders": ["orderdate", "region", "rep", "item"]

# Optional 0-based header row per table
header_rows:
  "Sample Orders": 0

# Report path; a timestamped name is used when omitted
# output: "reports/comparison_report.xlsx"

# Key auto-detection heuristics
uniqueness_threshold: 0.95
composite_key_widths: [2, 3]
"""


def create_sample_config(output_path: Path) -> Path:
    """
    Create a sample configuration file.

    Args:
        output_path: Where to save the config

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    logger.info("config.sample_created", file=str(output_path))
    return output_path
