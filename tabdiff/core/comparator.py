"""
Core table comparison logic.
Single responsibility: compare every configured table of two workbook
versions and collect one result per table.
"""

import traceback
from typing import List, Optional

from .aggregator import ComparisonResult, aggregate
from .diff_engine import DiffEngine
from .key_selector import KeySelector
from .key_strategy import FullRowHash, KeyStrategy
from .records import Dataset
from ..adapters.file_reader import WorkbookReader
from ..config.manager import ComparisonConfig
from ..utils.logger import get_logger


logger = get_logger()


def compare_datasets(table_name: str, dataset1: Dataset, dataset2: Dataset,
                     key_strategy: Optional[KeyStrategy]) -> ComparisonResult:
    """
    Run the four classifications for one table and aggregate them.

    Args:
        table_name: Table being compared
        dataset1: Old records
        dataset2: New records
        key_strategy: Selected strategy; full-row hashing when None

    Returns:
        Comparison result for the table
    """
    engine = DiffEngine(key_strategy or FullRowHash())

    new = engine.find_new(dataset1, dataset2)
    deleted = engine.find_deleted(dataset1, dataset2)
    modified = engine.find_modified(dataset1, dataset2)
    dup1 = engine.find_duplicates(dataset1)
    dup2 = engine.find_duplicates(dataset2)

    return aggregate(table_name, dataset1, dataset2, key_strategy,
                     new, deleted, modified.records, modified.column_changes,
                     dup1, dup2)


class WorkbookComparator:
    """
    Compare the tables of two workbook versions.

    Tables are processed one after another. A failure in one table is
    logged and that table is left out of the results; the others still run.
    """

    def __init__(self, reader: WorkbookReader, config: ComparisonConfig,
                 selector: Optional[KeySelector] = None):
        """
        Initialize comparator.

        Args:
            reader: Record source for both files
            config: Comparison configuration
            selector: Key selector; built from the config thresholds when omitted
        """
        self.reader = reader
        self.config = config
        self.selector = selector or KeySelector(
            threshold=config.uniqueness_threshold,
            composite_widths=config.composite_key_widths,
        )

    def resolve_tables(self) -> List[str]:
        """Configured tables, or every table of the old file."""
        if not self.config.all_tables:
            return list(self.config.tables)

        tables = self.reader.list_tables(self.config.file1)
        logger.info("comparator.all_tables", tables=tables)
        return tables

    def table_differences(self):
        """
        Tables present in only one of the two files.

        Returns:
            ``(added, removed)``: names only in the new file and names only
            in the old file
        """
        tables1 = self.reader.list_tables(self.config.file1)
        tables2 = self.reader.list_tables(self.config.file2)
        added = [t for t in tables2 if t not in tables1]
        removed = [t for t in tables1 if t not in tables2]
        return added, removed

    def compare_table(self, table_name: str) -> Optional[ComparisonResult]:
        """
        Compare one table.

        Args:
            table_name: Table to compare

        Returns:
            Comparison result, or None when the table is empty in both files
        """
        logger.info("comparator.table_start", table=table_name)

        header_row = self.config.header_row(table_name)
        dataset1 = self.reader.read_table(self.config.file1, table_name, header_row)
        dataset2 = self.reader.read_table(self.config.file2, table_name, header_row)

        if not dataset1 and not dataset2:
            logger.warning("comparator.table_empty", table=table_name)
            return None

        # Key inference looks at the old side unless it is empty
        key_strategy = self.selector.select_key(
            dataset1 if dataset1 else dataset2,
            table_name,
            self.config.key_override(table_name),
        )

        if isinstance(key_strategy, FullRowHash) and dataset1 and dataset2:
            engine = DiffEngine(key_strategy)
            logger.debug("comparator.full_row_samples",
                         table=table_name,
                         sample_1=[engine.key(row) for row in dataset1[:2]],
                         sample_2=[engine.key(row) for row in dataset2[:2]])

        result = compare_datasets(table_name, dataset1, dataset2, key_strategy)

        logger.info("comparator.table_summary", **result.summary())
        return result

    def compare_all(self) -> List[ComparisonResult]:
        """
        Compare every configured table.

        Returns:
            Results in table order; failed and empty tables are omitted
        """
        logger.info("comparator.starting",
                    file1=str(self.config.file1),
                    file2=str(self.config.file2))

        results: List[ComparisonResult] = []
        for table_name in self.resolve_tables():
            try:
                result = self.compare_table(table_name)
            except Exception as e:
                logger.error("comparator.table_failed",
                             table=table_name,
                             error=str(e),
                             traceback=traceback.format_exc())
                continue

            if result is not None:
                results.append(result)

        logger.info("comparator.complete",
                    tables=len(results))
        return results
