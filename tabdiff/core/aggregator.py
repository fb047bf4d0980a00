"""
Per-table result assembly.
Single responsibility: fold classification outputs into a result object and
render them as flat detail rows for reporting.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .diff_engine import ModifiedRecord
from .key_strategy import FULL_ROW_DISPLAY, KeyStrategy
from .records import Dataset, Record
from ..utils.normalizers import normalize_value


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing one table between the old and new file."""

    table_name: str
    key_strategy: Optional[KeyStrategy]
    row_count_1: int = 0
    row_count_2: int = 0
    column_count_1: int = 0
    column_count_2: int = 0
    new_records: Tuple[Record, ...] = ()
    deleted_records: Tuple[Record, ...] = ()
    modified_records: Tuple[ModifiedRecord, ...] = ()
    duplicates_1: Tuple[Record, ...] = ()
    duplicates_2: Tuple[Record, ...] = ()
    column_changes: Dict[str, int] = field(default_factory=dict)

    @property
    def key_display(self) -> str:
        if self.key_strategy is None:
            return FULL_ROW_DISPLAY
        return self.key_strategy.display

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicates_1 or self.duplicates_2)

    def summary(self) -> Dict[str, Any]:
        """Counts used for logging and console output."""
        return {
            "table": self.table_name,
            "key": self.key_display,
            "rows_1": self.row_count_1,
            "rows_2": self.row_count_2,
            "columns_1": self.column_count_1,
            "columns_2": self.column_count_2,
            "new": len(self.new_records),
            "deleted": len(self.deleted_records),
            "modified": len(self.modified_records),
            "duplicates_1": len(self.duplicates_1),
            "duplicates_2": len(self.duplicates_2),
        }


def _column_count(dataset: Dataset) -> int:
    return len(dataset[0]) if dataset else 0


def aggregate(table_name: str, dataset1: Dataset, dataset2: Dataset,
              key_strategy: Optional[KeyStrategy],
              new: Sequence[Record], deleted: Sequence[Record],
              modified: Sequence[ModifiedRecord],
              column_changes: Mapping[str, int],
              dup1: Sequence[Record], dup2: Sequence[Record]) -> ComparisonResult:
    """
    Assemble a comparison result. No recomputation happens here.

    Column counts use the first record of each side as representative.
    """
    return ComparisonResult(
        table_name=table_name,
        key_strategy=key_strategy,
        row_count_1=len(dataset1),
        row_count_2=len(dataset2),
        column_count_1=_column_count(dataset1),
        column_count_2=_column_count(dataset2),
        new_records=tuple(new),
        deleted_records=tuple(deleted),
        modified_records=tuple(modified),
        duplicates_1=tuple(dup1),
        duplicates_2=tuple(dup2),
        column_changes=dict(column_changes),
    )


@dataclass(frozen=True)
class DetailRecord:
    """One flat report row for a classified record."""

    table_name: str
    row_number: int
    details: str
    side: Optional[str] = None

    def as_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {}
        if self.side is not None:
            row["File"] = self.side
        row["Sheet Name"] = self.table_name
        row["Row Number"] = self.row_number
        row["Full Details"] = self.details
        return row


def format_detail_records(records: Sequence[Union[Mapping[str, str], ModifiedRecord]],
                          table_name: str,
                          side: Optional[str] = None) -> List[DetailRecord]:
    """
    Render records as ``"column: value | column: value"`` detail rows.

    Empty and ``"nan"`` values are left out and records with nothing left
    to show are dropped. The row number is the record's source row when
    known, otherwise its position in ``records`` plus two (header row and
    1-based numbering).

    Args:
        records: Records or modified records of one classification
        table_name: Table the records belong to
        side: Label of the file the records came from (duplicates only)

    Returns:
        Detail rows in input order
    """
    details: List[DetailRecord] = []
    for index, record in enumerate(records):
        row_number = getattr(record, "row_number", None)
        if isinstance(record, ModifiedRecord):
            record = record.to_record()

        parts = []
        for col, value in record.items():
            if normalize_value(value) not in ("", "nan"):
                parts.append(f"{col}: {value}")

        if not parts:
            continue

        details.append(DetailRecord(
            table_name=table_name,
            row_number=row_number if row_number is not None else index + 2,
            details=" | ".join(parts),
            side=side,
        ))
    return details
