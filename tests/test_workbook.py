"""Tests for writing sheet plans to Excel workbooks."""

import openpyxl
import pandas as pd
import pytest

from xml_to_xls.utils.errors import WriteFailure
from xml_to_xls.utils.workbook import build_frame, sanitize_sheet_name, write_workbook


def read_sheets(path):
    return pd.read_excel(path, sheet_name=None, dtype=str, keep_default_na=False)


class TestWriteWorkbook:
    """Test suite for write_workbook()."""

    def test_one_sheet_per_plan_entry(self, tmp_path):
        plan = {
            "items_item": [{"id": "1", "val": "foo"}, {"id": "2", "val": "bar"}],
            "metadata": [{"title": "T"}],
        }
        output = write_workbook(plan, tmp_path / "out.xlsx")

        sheets = read_sheets(output)
        assert list(sheets) == ["items_item", "metadata"]
        assert sheets["items_item"].to_dict("records") == plan["items_item"]
        assert sheets["metadata"].to_dict("records") == [{"title": "T"}]

    def test_missing_keys_render_empty(self, tmp_path):
        plan = {"rows": [{"a": "1"}, {"b": "2"}]}
        sheets = read_sheets(write_workbook(plan, tmp_path / "out.xlsx"))
        assert sheets["rows"].to_dict("records") == [{"a": "1", "b": ""}, {"a": "", "b": "2"}]

    def test_sheet_names_sanitized(self, tmp_path):
        long_name = "x" * 40
        plan = {
            long_name: [{"a": "1"}],
            long_name + "y": [{"a": "2"}],
            "bad/name:[1]": [{"a": "3"}],
        }
        sheets = read_sheets(write_workbook(plan, tmp_path / "out.xlsx"))
        assert list(sheets) == ["x" * 31, "x" * 29 + "~2", "bad_name__1_"]

    def test_leading_equals_stays_text(self, tmp_path):
        rows = [{"v": "=1+2"}, {"v": "=HYPERLINK(\"http://example.com\")"}]
        output = write_workbook({"i": rows}, tmp_path / "out.xlsx")

        sheet = openpyxl.load_workbook(output)["i"]
        assert sheet["A2"].data_type == "s"
        assert sheet["A3"].data_type == "s"
        assert read_sheets(output)["i"].to_dict("records") == rows

    def test_progress_reported_while_writing(self, tmp_path):
        calls = []
        write_workbook({"a": [{"x": "1"}]}, tmp_path / "out.xlsx", progress_callback=lambda p, m: calls.append(p))
        assert calls == [50, 60, 80]

    def test_no_progress_for_empty_plan(self, tmp_path):
        calls = []
        with pytest.raises(WriteFailure):
            write_workbook({}, tmp_path / "out.xlsx", progress_callback=lambda p, m: calls.append(p))
        assert calls == []

    def test_empty_plan_fails(self, tmp_path):
        with pytest.raises(WriteFailure):
            write_workbook({}, tmp_path / "out.xlsx")

    def test_unwritable_path_fails(self, tmp_path):
        with pytest.raises(WriteFailure):
            write_workbook({"a": [{"x": "1"}]}, tmp_path / "missing" / "out.xlsx")


class TestSanitizeSheetName:
    """Test suite for sanitize_sheet_name()."""

    def test_valid_name_unchanged(self):
        assert sanitize_sheet_name("Orders_Order", set()) == "Orders_Order"

    def test_duplicates_are_case_insensitive(self):
        taken = set()
        assert sanitize_sheet_name("Data", taken) == "Data"
        assert sanitize_sheet_name("data", taken) == "data~2"
        assert sanitize_sheet_name("DATA", taken) == "DATA~3"

    def test_empty_name(self):
        assert sanitize_sheet_name("", set()) == "Sheet"

    def test_apostrophes_stripped(self):
        assert sanitize_sheet_name("'quoted'", set()) == "quoted"


class TestBuildFrame:
    """Test suite for build_frame()."""

    def test_columns_in_first_seen_order(self):
        frame = build_frame([{"b": "1", "a": "2"}, {"c": "3", "a": "4"}])
        assert list(frame.columns) == ["b", "a", "c"]
