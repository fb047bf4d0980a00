"""
Tests for reading workbook tables into normalized records.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tabdiff.adapters.file_reader import WorkbookReader, qpath


@pytest.fixture
def reader():
    with WorkbookReader() as r:
        yield r


def test_qpath_escapes_quotes_and_backslashes():
    assert qpath("C:\\data\\o'brien.csv") == "'C:/data/o''brien.csv'"


def test_list_tables_of_workbook(reader, customer_workbooks):
    old, new = customer_workbooks
    assert reader.list_tables(old) == ["Customers", "Orders"]
    assert reader.list_tables(new) == ["Customers", "Orders", "Returns"]


def test_list_tables_of_flat_file(reader, tmp_path):
    assert reader.list_tables(tmp_path / "snapshot_2024.csv") == ["snapshot_2024"]


def test_list_tables_of_missing_workbook(reader, tmp_path):
    assert reader.list_tables(tmp_path / "missing.xlsx") == []


def test_read_table_normalizes_names_and_values(reader, customer_workbooks):
    old, _ = customer_workbooks

    records = reader.read_table(old, "Customers")

    assert len(records) == 5
    assert list(records[0]) == ["customer_id", "name", "city"]
    assert dict(records[0]) == {"customer_id": "1", "name": "alice", "city": "oslo"}


def test_read_table_row_numbers(reader, customer_workbooks):
    old, _ = customer_workbooks
    records = reader.read_table(old, "Customers")
    assert [r.row_number for r in records] == [2, 3, 4, 5, 6]


def test_header_row_offset(reader, make_workbook):
    path = make_workbook("titled.xlsx", {
        "Report": [
            ["Quarterly export", None],
            ["Generated 2024-01-31", None],
            ["Item", "Qty"],
            ["bolt", 4],
            ["nut", 9],
        ],
    })

    records = reader.read_table(path, "Report", header_row=2)

    assert [dict(r) for r in records] == [
        {"item": "bolt", "qty": "4"},
        {"item": "nut", "qty": "9"},
    ]
    assert records[0].row_number == 4


def test_placeholder_columns_are_dropped(reader, make_workbook):
    path = make_workbook("placeholders.xlsx", {
        "Data": [
            ["id", None, "name"],
            [1, "x", "a"],
            [2, "y", "b"],
        ],
    })

    records = reader.read_table(path, "Data")

    assert list(records[0]) == ["id", "name"]


def test_rows_without_values_are_dropped(reader, make_workbook):
    path = make_workbook("sparse.xlsx", {
        "Data": [
            ["id", "name", "extra"],
            [1, "a", None],
            [None, None, "keep"],
        ],
    })

    records = reader.read_table(path, "Data")

    assert len(records) == 2
    assert records[1]["extra"] == "keep"


def test_missing_sheet_is_empty(reader, customer_workbooks):
    old, _ = customer_workbooks
    assert reader.read_table(old, "Returns") == []


def test_missing_file_is_empty(reader, tmp_path):
    assert reader.read_table(tmp_path / "nope.xlsx", "Customers") == []


def test_unsupported_file_is_empty(reader, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("id\n1\n", encoding="utf-8")
    assert reader.read_table(path, "notes") == []


def test_empty_sheet_is_empty(reader, make_workbook):
    path = make_workbook("blank.xlsx", {"Blank": [], "Data": [["id"], [1]]})
    assert reader.read_table(path, "Blank") == []


def test_csv_is_read_as_text(reader, tmp_path):
    path = tmp_path / "orders.csv"
    path.write_text("Order ID,Amount\nA1,10.00\nA2,007\n", encoding="utf-8")

    records = reader.read_table(path, "orders")

    assert [dict(r) for r in records] == [
        {"order_id": "a1", "amount": "10"},
        {"order_id": "a2", "amount": "7"},
    ]


def test_csv_ignores_requested_table_name(reader, tmp_path):
    path = tmp_path / "v2.csv"
    pd.DataFrame({"id": [1, 2]}).to_csv(path, index=False)
    assert len(reader.read_table(path, "v1")) == 2


def test_parquet(reader, tmp_path):
    path = tmp_path / "snapshot.parquet"
    reader.con.execute(
        f"COPY (SELECT 1 AS id, 'Alice' AS name) TO {qpath(path)} (FORMAT PARQUET)"
    )

    records = reader.read_table(path, "snapshot")

    assert [dict(r) for r in records] == [{"id": "1", "name": "alice"}]


def test_close_is_idempotent():
    reader = WorkbookReader()
    reader.con.execute("SELECT 1")
    reader.close()
    reader.close()
