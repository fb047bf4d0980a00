"""
Shared fixtures: small workbooks written to a temporary directory.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


def write_workbook(path: Path, sheets: dict) -> Path:
    """
    Write ``{sheet name: list of rows}`` to an xlsx file.

    The first row of each sheet is written as-is, so callers control the
    header row and any title rows above it.
    """
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture
def make_workbook(tmp_path):
    """Factory writing a workbook under tmp_path."""
    def _make(name: str, sheets: dict) -> Path:
        return write_workbook(tmp_path / name, sheets)
    return _make


@pytest.fixture
def customer_workbooks(make_workbook):
    """Old and new versions of a two-sheet workbook."""
    old = make_workbook("old.xlsx", {
        "Customers": [
            ["Customer ID", "Name", "City"],
            [1, "Alice", "Oslo"],
            [2, "Bob", "Rome"],
            [3, "Cid", "Lima"],
            [4, "Dee", "Kyiv"],
            [5, "Eve", "Nice"],
        ],
        "Orders": [
            ["Order ID", "Amount"],
            ["A1", 10],
            ["A2", 20],
            ["A2", 20],
        ],
    })
    new = make_workbook("new.xlsx", {
        "Customers": [
            ["customer id", "name", "city"],
            [1, "alice", "Oslo"],
            [2, "Robert", "Rome"],
            [4, "Dee", "Kyiv"],
            [5, "Eve", "Nice"],
            [6, "Fay", "Bern"],
        ],
        "Orders": [
            ["Order ID", "Amount"],
            ["A1", 10.0],
            ["A2", 20],
            ["A3", 30],
        ],
        "Returns": [
            ["Return ID"],
            ["R1"],
        ],
    })
    return old, new
