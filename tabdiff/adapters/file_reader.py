"""
Workbook table reader.
Single responsibility: read one named table of a file into normalized records.
"""

from pathlib import Path
from typing import List, Optional, Union
import pandas as pd
import duckdb

from ..core.records import Record, to_dataset
from ..utils.logger import get_logger


logger = get_logger()


EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
SINGLE_TABLE_SUFFIXES = (".csv", ".parquet")


def qpath(path: Union[str, Path]) -> str:
    """
    Quote a file path for use inside a DuckDB query.

    Args:
        path: File path

    Returns:
        Single-quoted path with forward slashes and escaped quotes
    """
    path_str = str(path).replace("\\", "/").replace("'", "''")
    return f"'{path_str}'"


class WorkbookReader:
    """
    Reads tables out of workbooks and flat files.

    Excel workbooks expose one table per sheet. CSV and Parquet files expose
    a single table named after the file stem; it is returned whatever table
    name is asked for, so two snapshots with different file names still line
    up.

    Reading never raises: a missing file, a missing sheet or a read failure
    is logged and yields an empty dataset.
    """

    def __init__(self, con: Optional[duckdb.DuckDBPyConnection] = None):
        """
        Initialize reader.

        Args:
            con: DuckDB connection used for CSV and Parquet files; an
                in-memory connection is opened on first use when omitted
        """
        self._con = con
        self._owns_connection = con is None

    @property
    def con(self) -> duckdb.DuckDBPyConnection:
        if self._con is None:
            self._con = duckdb.connect(":memory:")
        return self._con

    def close(self):
        """Close the DuckDB connection if this reader opened it."""
        if self._con is not None and self._owns_connection:
            self._con.close()
            self._con = None

    def __enter__(self) -> "WorkbookReader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def list_tables(self, file_path: Union[str, Path]) -> List[str]:
        """
        List table names available in a file.

        Args:
            file_path: Workbook or flat file

        Returns:
            Sheet names for workbooks, ``[stem]`` for flat files, ``[]``
            when the file cannot be opened
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()

        if suffix in SINGLE_TABLE_SUFFIXES:
            return [file_path.stem]

        try:
            with pd.ExcelFile(file_path) as workbook:
                return [str(name) for name in workbook.sheet_names]
        except Exception as e:
            logger.error("reader.list_tables_failed",
                         file=str(file_path),
                         error=str(e))
            return []

    def read_table(self, file_path: Union[str, Path], table_name: str,
                   header_row: int = 0) -> List[Record]:
        """
        Read a table as normalized records.

        Args:
            file_path: Workbook or flat file
            table_name: Sheet name (ignored for flat files)
            header_row: 0-based row holding the column headers

        Returns:
            Records, with placeholder columns and empty rows dropped; empty
            when the file or table is missing or unreadable
        """
        file_path = Path(file_path)

        if not file_path.exists():
            logger.warning("reader.file_missing", file=str(file_path))
            return []

        suffix = file_path.suffix.lower()

        try:
            if suffix in EXCEL_SUFFIXES:
                df = self._read_excel(file_path, table_name, header_row)
            elif suffix == ".csv":
                df = self._read_csv(file_path, header_row)
            elif suffix == ".parquet":
                df = self._read_parquet(file_path)
                header_row = 0
            else:
                logger.error("reader.unsupported_file", file=str(file_path), suffix=suffix)
                return []
        except Exception as e:
            logger.error("reader.table_failed",
                         file=str(file_path),
                         table=table_name,
                         error=str(e))
            return []

        if df is None:
            return []

        # Header sits on 1-based row header_row + 1, data starts right below it
        records = to_dataset(df.to_dict(orient="records"),
                             first_row_number=header_row + 2)

        logger.info("reader.table_loaded",
                    file=file_path.name,
                    table=table_name,
                    rows=len(records),
                    columns=len(records[0]) if records else 0)

        return records

    def _read_excel(self, file_path: Path, sheet_name: str,
                    header_row: int) -> Optional[pd.DataFrame]:
        with pd.ExcelFile(file_path) as workbook:
            if sheet_name not in workbook.sheet_names:
                logger.warning("reader.table_missing",
                               file=file_path.name,
                               table=sheet_name)
                return None

            return pd.read_excel(workbook, sheet_name=sheet_name,
                                 header=header_row, dtype=object)

    def _read_csv(self, file_path: Path, header_row: int) -> pd.DataFrame:
        return self.con.execute(f"""
            SELECT * FROM read_csv({qpath(file_path)},
                                   header = true,
                                   all_varchar = true,
                                   skip = {int(header_row)})
        """).df()

    def _read_parquet(self, file_path: Path) -> pd.DataFrame:
        return self.con.execute(
            f"SELECT * FROM read_parquet({qpath(file_path)})"
        ).df()
