"""
Excel report writer.
Single responsibility: persist comparison results as a styled workbook.
"""

from datetime import datetime, timezone
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import pandas as pd

from ..core.aggregator import ComparisonResult, DetailRecord, format_detail_records
from ..utils.logger import get_logger


logger = get_logger()


DETAIL_COLUMNS = ["Sheet Name", "Row Number", "Full Details"]
DUPLICATE_COLUMNS = ["File"] + DETAIL_COLUMNS

HEADER_BLUE = "#4472C4"
MISMATCH_RED = "#FF6B6B"
NEUTRAL_GREY = "#D3D3D3"


def default_report_path() -> Path:
    """``comparison_report_<timestamp>.xlsx`` in the working directory."""
    stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    return Path(f"comparison_report_{stamp}.xlsx")


def _ver(package: str) -> str:
    try:
        return version(package)
    except PackageNotFoundError:
        return "n/a"


class ExcelReportWriter:
    """
    Write comparison results to an Excel workbook.

    Sheets:
    - Validation Summary: one block per table with counts and yes/no flags
    - New / Modified / Deleted: consolidated detail rows across tables
    - Duplicates: detail rows tagged with the file they came from
    - Column Changes: how many rows changed per column per table
    - Data_Lineage: inputs, labels, timestamp and library versions

    Detail sheets are only written when they have rows.
    """

    def __init__(self, file1_label: str = "Old Version",
                 file2_label: str = "New Version",
                 lineage: Optional[Dict[str, Any]] = None):
        """
        Initialize report writer.

        Args:
            file1_label: Display label of the old file
            file2_label: Display label of the new file
            lineage: Extra key/value pairs for the Data_Lineage sheet
        """
        self.file1_label = file1_label
        self.file2_label = file2_label
        self.lineage = dict(lineage or {})

    def collect_details(self, results: Sequence[ComparisonResult]) -> Dict[str, List[DetailRecord]]:
        """
        Consolidate detail rows of every table per classification.

        Args:
            results: Per-table comparison results

        Returns:
            ``{"New": [...], "Modified": [...], "Deleted": [...], "Duplicates": [...]}``
        """
        details: Dict[str, List[DetailRecord]] = {
            "New": [], "Modified": [], "Deleted": [], "Duplicates": []
        }
        for result in results:
            name = result.table_name
            details["New"].extend(format_detail_records(result.new_records, name))
            details["Modified"].extend(format_detail_records(result.modified_records, name))
            details["Deleted"].extend(format_detail_records(result.deleted_records, name))
            details["Duplicates"].extend(
                format_detail_records(result.duplicates_1, name, side=self.file1_label))
            details["Duplicates"].extend(
                format_detail_records(result.duplicates_2, name, side=self.file2_label))
        return details

    def write(self, results: Sequence[ComparisonResult],
              output_path: Optional[Union[str, Path]] = None,
              tables_added: Sequence[str] = (),
              tables_removed: Sequence[str] = ()) -> Optional[Path]:
        """
        Write the report.

        Args:
            results: Per-table comparison results
            output_path: Target workbook; a timestamped name when omitted
            tables_added: Tables only present in the new file
            tables_removed: Tables only present in the old file

        Returns:
            Path written, or None when there was nothing to report
        """
        if not results:
            logger.warning("report.nothing_to_report")
            return None

        output_path = Path(output_path) if output_path else default_report_path()
        output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info("report.generating", file=str(output_path), tables=len(results))

        details = self.collect_details(results)

        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            workbook = writer.book
            formats = self._formats(workbook)

            self._write_validation_summary(writer, results, formats,
                                           tables_added, tables_removed)

            for sheet in ("New", "Modified", "Deleted"):
                if details[sheet]:
                    self._write_detail_sheet(writer, sheet, details[sheet],
                                             DETAIL_COLUMNS, formats)
            if details["Duplicates"]:
                self._write_detail_sheet(writer, "Duplicates", details["Duplicates"],
                                         DUPLICATE_COLUMNS, formats)

            self._write_column_changes(writer, results, formats)
            self._write_lineage(writer, results)

        logger.info("report.written",
                    file=str(output_path),
                    new=len(details["New"]),
                    modified=len(details["Modified"]),
                    deleted=len(details["Deleted"]),
                    duplicates=len(details["Duplicates"]))

        return output_path

    def _formats(self, workbook) -> Dict[str, Any]:
        border = {"border": 1}
        return {
            "header": workbook.add_format({
                **border, "bold": True, "font_color": "#FFFFFF",
                "bg_color": HEADER_BLUE, "align": "center", "valign": "vcenter",
            }),
            "label": workbook.add_format({**border, "align": "center"}),
            "value": workbook.add_format({**border, "align": "center"}),
            "mismatch": workbook.add_format({
                **border, "align": "center", "font_color": "#FFFFFF",
                "bg_color": MISMATCH_RED,
            }),
            "no": workbook.add_format({**border, "align": "center", "bg_color": NEUTRAL_GREY}),
            "yes": workbook.add_format({
                **border, "align": "center", "bold": True, "font_color": "#FFFFFF",
                "bg_color": MISMATCH_RED,
            }),
            "comment": workbook.add_format({**border, "align": "left"}),
        }

    def _write_validation_summary(self, writer, results: Sequence[ComparisonResult],
                                  formats: Dict[str, Any],
                                  tables_added: Sequence[str],
                                  tables_removed: Sequence[str]):
        ws = writer.book.add_worksheet("Validation Summary")
        ws.set_column(0, 0, 25)
        ws.set_column(1, 2, 20)
        ws.set_column(3, 3, 60)

        row = 0
        ws.write_row(row, 0, ["Tab Validation Summary", "", "", "Comments"], formats["header"])
        row += 1
        ws.write_row(row, 0, ["Validations", self.file1_label, self.file2_label, ""],
                     formats["header"])
        row += 1

        total = len(results)
        row = self._count_row(ws, row, "Total Tabs Count", total, total, "Count Match", formats)
        row = self._yes_no_row(
            ws, row, "Tabs Added", bool(tables_added),
            ", ".join(tables_added) if tables_added else "No new tabs", formats)
        row = self._yes_no_row(
            ws, row, "Tabs Removed", bool(tables_removed),
            ", ".join(tables_removed) if tables_removed else "No tabs removed", formats)

        for result in results:
            row += 1
            ws.write_row(row, 0, [f"Tab Name: {result.table_name}", "", "", "Comments"],
                         formats["header"])
            row += 1
            ws.write_row(row, 0, ["Validations", self.file1_label, self.file2_label, ""],
                         formats["header"])
            row += 1

            rows_match = result.row_count_1 == result.row_count_2
            row = self._count_row(
                ws, row, "Row Count", result.row_count_1, result.row_count_2,
                "Row Count is match" if rows_match else "Row Count is mismatch", formats)

            cols_match = result.column_count_1 == result.column_count_2
            row = self._count_row(
                ws, row, "Column Count", result.column_count_1, result.column_count_2,
                "Column Count is match" if cols_match else "Column Count is mismatch", formats)

            row = self._count_row(ws, row, "Key Column", result.key_display,
                                  result.key_display, "", formats)

            new = len(result.new_records)
            row = self._yes_no_row(
                ws, row, "New Records", new > 0,
                f"{new}-New Records available in New Records tab" if new else "", formats)

            modified = len(result.modified_records)
            row = self._yes_no_row(
                ws, row, "Modified Records", modified > 0,
                f"{modified}-Modified Records available in Modified Record tab" if modified else "",
                formats)

            deleted = len(result.deleted_records)
            row = self._yes_no_row(
                ws, row, "Deleted Records", deleted > 0,
                f"{deleted}-Deleted Record details available in Deleted Records Data tab"
                if deleted else "",
                formats)

            row = self._yes_no_row(ws, row, "Duplicate Records", result.has_duplicates, "",
                                   formats)

        ws.freeze_panes(2, 0)

    def _count_row(self, ws, row: int, label: str, value1, value2, comment: str,
                   formats: Dict[str, Any]) -> int:
        value_format = formats["value"] if value1 == value2 else formats["mismatch"]
        ws.write(row, 0, label, formats["label"])
        ws.write(row, 1, value1, value_format)
        ws.write(row, 2, value2, value_format)
        ws.write(row, 3, comment, formats["comment"])
        return row + 1

    def _yes_no_row(self, ws, row: int, label: str, has_issue: bool, comment: str,
                    formats: Dict[str, Any]) -> int:
        ws.write(row, 0, label, formats["label"])
        ws.write(row, 1, "No", formats["no"])
        ws.write(row, 2, "Yes" if has_issue else "No", formats["yes"] if has_issue else formats["no"])
        ws.write(row, 3, comment, formats["comment"])
        return row + 1

    def _write_detail_sheet(self, writer, sheet_name: str, records: List[DetailRecord],
                            columns: List[str], formats: Dict[str, Any]):
        df = pd.DataFrame([record.as_row() for record in records], columns=columns)
        df.to_excel(writer, sheet_name=sheet_name, index=False)

        ws = writer.sheets[sheet_name]
        widths = {"File": 20, "Sheet Name": 25, "Row Number": 12, "Full Details": 100}
        for idx, col in enumerate(columns):
            ws.set_column(idx, idx, widths[col])
            ws.write(0, idx, col, formats["header"])

        nrows, ncols = df.shape
        ws.freeze_panes(1, 0)
        ws.autofilter(0, 0, max(nrows, 1), max(ncols - 1, 0))

    def _write_column_changes(self, writer, results: Sequence[ComparisonResult],
                              formats: Dict[str, Any]):
        rows = [
            [result.table_name, column, count]
            for result in results
            for column, count in result.column_changes.items()
        ]
        if not rows:
            return

        df = pd.DataFrame(rows, columns=["Sheet Name", "Column", "Rows Changed"])
        df.to_excel(writer, sheet_name="Column Changes", index=False)

        ws = writer.sheets["Column Changes"]
        ws.set_column(0, 1, 25)
        ws.set_column(2, 2, 14)
        for idx, col in enumerate(df.columns):
            ws.write(0, idx, col, formats["header"])

    def _write_lineage(self, writer, results: Sequence[ComparisonResult]):
        lineage_rows = [[key, str(value)] for key, value in self.lineage.items()]
        lineage_rows += [
            ["file1_label", self.file1_label],
            ["file2_label", self.file2_label],
            ["tables", ", ".join(result.table_name for result in results)],
            ["timestamp_utc", datetime.now(timezone.utc).isoformat()],
            ["tabdiff", _ver("tabdiff")],
            ["pandas", _ver("pandas")],
            ["duckdb", _ver("duckdb")],
            ["openpyxl", _ver("openpyxl")],
            ["XlsxWriter", _ver("XlsxWriter")],
        ]
        pd.DataFrame(lineage_rows, columns=["Key", "Value"]).to_excel(
            writer, sheet_name="Data_Lineage", index=False)
