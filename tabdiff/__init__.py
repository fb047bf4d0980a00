"""
tabdiff - Compare two versions of a workbook table by table.
"""

__version__ = "1.0.0"

from .core.comparator import WorkbookComparator, compare_datasets
from .core.aggregator import ComparisonResult
from .core.key_selector import KeySelector, select_key
from .core.key_strategy import SingleColumn, CompositeColumns, FullRowHash
from .config.manager import ConfigManager, ComparisonConfig
from .adapters.file_reader import WorkbookReader
from .adapters.report_writer import ExcelReportWriter
from .ui.progress import ProgressMonitor, get_progress_monitor
from .utils.logger import get_logger

__all__ = [
    "WorkbookComparator",
    "compare_datasets",
    "ComparisonResult",
    "KeySelector",
    "select_key",
    "SingleColumn",
    "CompositeColumns",
    "FullRowHash",
    "ConfigManager",
    "ComparisonConfig",
    "WorkbookReader",
    "ExcelReportWriter",
    "ProgressMonitor",
    "get_progress_monitor",
    "get_logger",
]
