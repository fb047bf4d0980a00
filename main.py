#!/usr/bin/env python3
"""
tabdiff - Main Entry Point
Compare two versions of a workbook table by table and write an Excel report.
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import yaml

from tabdiff import (
    __version__,
    ComparisonConfig,
    ConfigManager,
    ExcelReportWriter,
    WorkbookComparator,
    WorkbookReader,
    get_logger,
    get_progress_monitor,
)
from tabdiff.config.manager import ConfigError, create_sample_config


logger = get_logger()


class TabDiffPipeline:
    """
    Main pipeline orchestrator.
    """

    def __init__(self, config: ComparisonConfig,
                 use_rich: bool = True,
                 verbose: bool = False):
        """
        Initialize pipeline.

        Args:
            config: Comparison configuration
            use_rich: Use Rich for console output
            verbose: Enable verbose output
        """
        self.config = config
        self.progress = get_progress_monitor(use_rich, verbose=verbose)

    def _check_inputs(self):
        for label, path in (("file1", self.config.file1), ("file2", self.config.file2)):
            if not Path(path).exists():
                raise FileNotFoundError(f"File not found ({label}): {path}")

    def run(self) -> Optional[Path]:
        """
        Run the comparison and write the report.

        Returns:
            Report path, or None when no table produced a result

        Raises:
            FileNotFoundError: If either input file is missing
        """
        self._check_inputs()

        logger.info("pipeline.starting",
                    file1=Path(self.config.file1).name,
                    file2=Path(self.config.file2).name)

        with WorkbookReader() as reader:
            comparator = WorkbookComparator(reader, self.config)

            with self.progress.task("Comparing tables"):
                results = comparator.compare_all()
                tables_added, tables_removed = comparator.table_differences()

        if not results:
            logger.warning("report.nothing_to_report", tables=0)
            self.progress.warning("No comparison results to report.")
            return None

        self.progress.show_results(results)

        writer = ExcelReportWriter(
            self.config.file1_label,
            self.config.file2_label,
            lineage={"file1": self.config.file1, "file2": self.config.file2},
        )
        report_path = writer.write(results, self.config.output,
                                   tables_added=tables_added,
                                   tables_removed=tables_removed)

        self.progress.info(f"Report generated: {report_path}")
        logger.info("pipeline.completed", report=str(report_path))
        return report_path


def build_config(args: argparse.Namespace) -> ComparisonConfig:
    """
    Build the comparison configuration from the config file and CLI flags.

    Args:
        args: Parsed command line arguments

    Returns:
        Comparison configuration
    """
    config_path = Path(args.config)
    cfg = {}
    if config_path.exists():
        manager = ConfigManager(config_path)
        manager.load()
        cfg = dict(manager.config)
    elif not (args.file1 and args.file2):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if args.file1:
        cfg["file1"] = args.file1
    if args.file2:
        cfg["file2"] = args.file2
    if args.table:
        cfg["tables"] = args.table
    if args.output:
        cfg["output"] = args.output

    return ConfigManager.from_dict(cfg)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="tabdiff - compare two versions of a workbook table by table"
    )

    parser.add_argument(
        "config",
        nargs="?",
        default="tabdiff.yaml",
        help="Configuration file (default: tabdiff.yaml)"
    )
    parser.add_argument("--file1", help="Old version (overrides config)")
    parser.add_argument("--file2", help="New version (overrides config)")
    parser.add_argument(
        "--table", "-t",
        action="append",
        help="Table to compare; repeat for several (default: all tables)"
    )
    parser.add_argument("--output", "-o", help="Report path")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output and debug logging"
    )
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable Rich console output"
    )
    parser.add_argument("--log-file", help="Append JSON log entries to this file")
    parser.add_argument(
        "--create-sample",
        action="store_true",
        help="Create sample configuration file"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"tabdiff v{__version__}"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logger.configure(level="DEBUG" if args.verbose else "INFO",
                     log_file=Path(args.log_file) if args.log_file else None)

    if args.create_sample:
        path = create_sample_config(Path("tabdiff_sample.yaml"))
        print(f"Sample configuration created: {path}")
        return 0

    try:
        config = build_config(args)
    except (FileNotFoundError, ConfigError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Use --create-sample to create a sample configuration", file=sys.stderr)
        return 1

    pipeline = TabDiffPipeline(config, use_rich=not args.no_rich, verbose=args.verbose)

    try:
        pipeline.run()
    except FileNotFoundError as e:
        logger.error("pipeline.failed", error=str(e))
        pipeline.progress.error(str(e))
        return 1
    except Exception as e:
        logger.error("pipeline.failed",
                     error=str(e),
                     traceback=traceback.format_exc())
        pipeline.progress.error(f"Pipeline failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
