"""
Record and dataset model.
Single responsibility: hold one table's normalized rows.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from ..utils.normalizers import normalize_row


class Record(Mapping):
    """
    Read-only ordered mapping of normalized column name -> normalized value.

    ``get`` defaults to ``""`` so that a column missing from one record
    behaves like an empty cell.
    """

    __slots__ = ("_values", "row_number")

    def __init__(self, values: Mapping[str, str],
                 row_number: Optional[int] = None):
        """
        Args:
            values: Column -> value mapping, already normalized
            row_number: 1-based source row (header row counted), if known
        """
        self._values: Dict[str, str] = dict(values)
        self.row_number = row_number

    @classmethod
    def from_raw(cls, row: Mapping[Any, Any],
                 row_number: Optional[int] = None) -> "Record":
        """Build a record from a raw source row, normalizing it."""
        return cls(normalize_row(row), row_number)

    def __getitem__(self, column: str) -> str:
        return self._values[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, column: str, default: str = "") -> str:
        return self._values.get(column, default)

    def __repr__(self) -> str:
        return f"Record({self._values!r}, row_number={self.row_number!r})"


# A dataset is just an ordered sequence of records
Dataset = Sequence[Record]


def to_dataset(rows: Iterable[Mapping[Any, Any]],
               first_row_number: int = 2) -> List[Record]:
    """
    Turn raw row mappings into a dataset.

    Rows that are already ``Record`` instances are kept as they are. Raw
    rows are normalized and numbered from ``first_row_number``; rows left
    with no non-empty value once placeholder columns are dropped
    are skipped.

    Args:
        rows: Raw row mappings
        first_row_number: Source row number of the first data row

    Returns:
        List of records
    """
    dataset: List[Record] = []
    for offset, row in enumerate(rows):
        if isinstance(row, Record):
            dataset.append(row)
            continue
        record = Record.from_raw(row, first_row_number + offset)
        if any(record.values()):
            dataset.append(record)
    return dataset
