"""
Key column inference.
Single responsibility: decide which column(s), if any, identify a row.
"""

from typing import Iterable, List, Optional, Sequence, Union

from .key_strategy import (
    KEY_SEPARATOR,
    CompositeColumns,
    FullRowHash,
    KeyStrategy,
    SingleColumn,
)
from .records import Dataset
from ..utils.logger import get_logger
from ..utils.normalizers import normalize_column_name, normalize_value


logger = get_logger()


DEFAULT_UNIQUENESS_THRESHOLD = 0.95
DEFAULT_COMPOSITE_WIDTHS = (2, 3)

KeyOverride = Union[str, Sequence[str]]


class KeySelectionError(Exception):
    """Exception raised when a key override cannot be used."""
    pass


def uniqueness_ratio(values: Iterable[str]) -> float:
    """
    Ratio of distinct values to total values.

    Args:
        values: Normalized values

    Returns:
        Ratio in [0, 1]; 0.0 when there are no values
    """
    values = list(values)
    if not values:
        return 0.0
    return len(set(values)) / len(values)


class KeySelector:
    """
    Heuristic key selection for one table.

    Order of preference:
    - explicit override from configuration, used as given
    - first single column whose non-empty values are unique enough
    - composite of the first N columns for each configured width
    - full-row hashing

    The threshold is a tunable heuristic: small samples can look unique by
    accident and genuinely unique keys with a few blanks can miss it.
    """

    def __init__(self, threshold: float = DEFAULT_UNIQUENESS_THRESHOLD,
                 composite_widths: Sequence[int] = DEFAULT_COMPOSITE_WIDTHS):
        """
        Initialize key selector.

        Args:
            threshold: Uniqueness ratio a candidate must exceed
            composite_widths: Prefix widths tried for composite keys
        """
        self.threshold = threshold
        self.composite_widths = tuple(composite_widths)

    def select_key(self, dataset: Dataset, table_name: str,
                   override: Optional[KeyOverride] = None) -> Optional[KeyStrategy]:
        """
        Select the key strategy for a table.

        Args:
            dataset: Records to inspect
            table_name: Table name, for logging
            override: Configured key column or columns for this table

        Returns:
            Selected key strategy, or None when the dataset is empty and no
            override is configured

        Raises:
            KeySelectionError: If the override names no columns
        """
        if override is not None:
            return self._from_override(override, table_name)

        if not dataset:
            logger.debug("key_selector.empty_dataset", table=table_name)
            return None

        columns = list(dataset[0].keys())

        for col in columns:
            values = [normalize_value(row.get(col, "")) for row in dataset]
            non_empty = [v for v in values if v != ""]
            ratio = uniqueness_ratio(non_empty)
            if ratio > self.threshold:
                logger.info("key_selector.auto_single",
                            table=table_name,
                            column=col,
                            ratio=round(ratio, 4))
                return SingleColumn(col)

        for width in self.composite_widths:
            if width > len(columns):
                continue
            candidate = columns[:width]
            keys = [
                KEY_SEPARATOR.join(normalize_value(row.get(col, "")) for col in candidate)
                for row in dataset
            ]
            ratio = uniqueness_ratio(keys)
            if ratio > self.threshold:
                logger.info("key_selector.auto_composite",
                            table=table_name,
                            columns=candidate,
                            ratio=round(ratio, 4))
                return CompositeColumns(tuple(candidate))

        logger.info("key_selector.full_row_fallback", table=table_name)
        return FullRowHash()

    def _from_override(self, override: KeyOverride,
                       table_name: str) -> KeyStrategy:
        if isinstance(override, str):
            columns: List[str] = [override]
        else:
            columns = list(override)

        columns = [normalize_column_name(col) for col in columns if str(col).strip()]
        if not columns:
            raise KeySelectionError(
                f"[KEY SELECTION ERROR] Empty key override for '{table_name}'. "
                f"Suggestion: List at least one column or remove the override."
            )

        logger.info("key_selector.user_specified",
                    table=table_name,
                    columns=columns)

        if len(columns) == 1:
            return SingleColumn(columns[0])
        return CompositeColumns(tuple(columns))


def select_key(dataset: Dataset, table_name: str,
               override: Optional[KeyOverride] = None,
               threshold: float = DEFAULT_UNIQUENESS_THRESHOLD) -> Optional[KeyStrategy]:
    """Select a key strategy with a default-configured selector."""
    return KeySelector(threshold=threshold).select_key(dataset, table_name, override)
