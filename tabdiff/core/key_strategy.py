"""
Key strategies and row hashing.
Single responsibility: turn a record into the key that identifies it.
"""

from dataclasses import dataclass
from typing import Mapping, Tuple, Union

from ..utils.normalizers import normalize_value


# Unit separator: a control character that never survives into cell text
KEY_SEPARATOR = "\x1f"

FULL_ROW_DISPLAY = "Full Row Hash"


@dataclass(frozen=True)
class SingleColumn:
    """One column identifies a row."""

    column: str

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,)

    @property
    def display(self) -> str:
        return self.column


@dataclass(frozen=True)
class CompositeColumns:
    """Several columns, in declared order, identify a row."""

    columns: Tuple[str, ...]

    def __post_init__(self):
        # Accept any sequence but store a tuple so the strategy stays hashable
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def display(self) -> str:
        return ", ".join(self.columns)


@dataclass(frozen=True)
class FullRowHash:
    """No declared key; every column of the record participates."""

    @property
    def columns(self) -> Tuple[str, ...]:
        return ()

    @property
    def display(self) -> str:
        return FULL_ROW_DISPLAY


KeyStrategy = Union[SingleColumn, CompositeColumns, FullRowHash]


def row_key(record: Mapping[str, str], strategy: KeyStrategy) -> str:
    """
    Compute the row key of a record under a key strategy.

    Deterministic and pure. Absent columns count as empty. Under
    ``FullRowHash`` the record's own column order is used, so the same
    values in a different column order give a different key.

    Args:
        record: Record (or any column -> value mapping)
        strategy: Key strategy selected for the table

    Returns:
        Row key string
    """
    if isinstance(strategy, SingleColumn):
        return normalize_value(record.get(strategy.column, ""))

    if isinstance(strategy, CompositeColumns):
        return KEY_SEPARATOR.join(
            normalize_value(record.get(col, "")) for col in strategy.columns
        )

    if isinstance(strategy, FullRowHash):
        return KEY_SEPARATOR.join(
            normalize_value(value) for value in record.values()
        )

    raise TypeError(f"Unknown key strategy: {strategy!r}")


def key_values(record: Mapping[str, str], strategy: KeyStrategy) -> dict:
    """Values of the strategy's key columns, in key order (empty for full-row)."""
    return {col: record.get(col, "") for col in strategy.columns}
