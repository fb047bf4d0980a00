"""
Record classification between two versions of a table.
Single responsibility: find new, deleted, modified and duplicate records.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .key_strategy import KeyStrategy, key_values, row_key
from .records import Dataset, Record
from ..utils.normalizers import normalize_value


@dataclass(frozen=True)
class ColumnChange:
    """Old and new normalized values of one column in one matched pair."""

    old: str
    new: str


@dataclass(frozen=True)
class ModifiedRecord:
    """A matched pair of records that differ in at least one column."""

    key_values: Dict[str, str]
    changes: Dict[str, ColumnChange]
    row_number: Optional[int] = None

    def to_record(self) -> Dict[str, str]:
        """
        Flatten to ``{key columns..., <col>_old, <col>_new, ...}``.

        Key columns come first so the entry can be identified at a glance.
        """
        flat = dict(self.key_values)
        for col, change in self.changes.items():
            flat[f"{col}_old"] = change.old
            flat[f"{col}_new"] = change.new
        return flat


@dataclass
class ModifiedResult:
    """Modified records plus the per-column change tally for the table."""

    records: List[ModifiedRecord] = field(default_factory=list)
    column_changes: Dict[str, int] = field(default_factory=dict)


class DiffEngine:
    """
    Classify records of two datasets under one key strategy.

    Row keys are computed once per record object and reused by every
    operation run through the same engine.
    """

    def __init__(self, strategy: KeyStrategy):
        self.strategy = strategy
        self._keys: Dict[int, str] = {}
        # Keep keyed records alive so their ids stay unique
        self._pinned: List[Mapping[str, str]] = []

    def key(self, record: Mapping[str, str]) -> str:
        """Row key of a record, memoized per record object."""
        ident = id(record)
        cached = self._keys.get(ident)
        if cached is None:
            cached = row_key(record, self.strategy)
            self._keys[ident] = cached
            self._pinned.append(record)
        return cached

    def find_new(self, dataset1: Dataset, dataset2: Dataset) -> List[Record]:
        """Records of dataset2 whose key never appears in dataset1."""
        if not dataset2:
            return []
        if not dataset1:
            return list(dataset2)

        keys1 = {self.key(row) for row in dataset1}
        return [row for row in dataset2 if self.key(row) not in keys1]

    def find_deleted(self, dataset1: Dataset, dataset2: Dataset) -> List[Record]:
        """Records of dataset1 whose key never appears in dataset2."""
        if not dataset1:
            return []
        if not dataset2:
            return list(dataset1)

        keys2 = {self.key(row) for row in dataset2}
        return [row for row in dataset1 if self.key(row) not in keys2]

    def find_modified(self, dataset1: Dataset, dataset2: Dataset) -> ModifiedResult:
        """
        Compare matched pairs column by column.

        For each key present on both sides (first occurrence per side,
        dataset1 order) every column of either record is compared. A column
        counts as changed when the normalized values differ and at least one
        of them is non-empty.

        Args:
            dataset1: Old records
            dataset2: New records

        Returns:
            Modified records and per-column change counts
        """
        result = ModifiedResult()
        if not dataset1 or not dataset2:
            return result

        first2: Dict[str, Mapping[str, str]] = {}
        for row in dataset2:
            first2.setdefault(self.key(row), row)

        seen = set()
        for row1 in dataset1:
            key = self.key(row1)
            if key in seen or key not in first2:
                continue
            seen.add(key)
            row2 = first2[key]

            changes: Dict[str, ColumnChange] = {}
            columns = list(row1.keys()) + [col for col in row2.keys() if col not in row1]
            for col in columns:
                old = normalize_value(row1.get(col, ""))
                new = normalize_value(row2.get(col, ""))
                if old != new and (old != "" or new != ""):
                    changes[col] = ColumnChange(old, new)
                    result.column_changes[col] = result.column_changes.get(col, 0) + 1

            if changes:
                result.records.append(ModifiedRecord(
                    key_values=key_values(row1, self.strategy),
                    changes=changes,
                    row_number=getattr(row2, "row_number", None),
                ))

        return result

    def find_duplicates(self, dataset: Dataset) -> List[Record]:
        """Every member of every key group with more than one record."""
        if not dataset:
            return []

        groups: Dict[str, List[Record]] = {}
        for row in dataset:
            groups.setdefault(self.key(row), []).append(row)

        # Members of a group stay adjacent, groups in first-seen order
        duplicates: List[Record] = []
        for rows in groups.values():
            if len(rows) > 1:
                duplicates.extend(rows)
        return duplicates


def find_new(dataset1: Dataset, dataset2: Dataset,
             strategy: KeyStrategy) -> List[Record]:
    """Records in dataset2 with no matching row key in dataset1."""
    return DiffEngine(strategy).find_new(dataset1, dataset2)


def find_deleted(dataset1: Dataset, dataset2: Dataset,
                 strategy: KeyStrategy) -> List[Record]:
    """Records in dataset1 with no matching row key in dataset2."""
    return DiffEngine(strategy).find_deleted(dataset1, dataset2)


def find_modified(dataset1: Dataset, dataset2: Dataset,
                  strategy: KeyStrategy) -> ModifiedResult:
    """Matched records with at least one changed column."""
    return DiffEngine(strategy).find_modified(dataset1, dataset2)


def find_duplicates(dataset: Dataset, strategy: KeyStrategy) -> List[Record]:
    """Records sharing a row key with another record of the same dataset."""
    return DiffEngine(strategy).find_duplicates(dataset)
