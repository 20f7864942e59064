import pandas as pd
from openpyxl import load_workbook

from export import write_results
from scraper.base import TermRecord


def test_write_results(tmp_path) -> None:
    records = [
        TermRecord(rus="кофе", en="coffee", pl="kawa"),
        TermRecord(rus="чай"),
    ]
    path = write_results(records, tmp_path / "results.xlsx")

    assert path.exists()
    df = pd.read_excel(path, sheet_name="Results")
    assert list(df.columns) == ["rus", "en", "pl"]
    assert df.to_dict("records") == [
        {"rus": "кофе", "en": "coffee", "pl": "kawa"},
        {"rus": "чай", "en": "No en text found", "pl": "No pl text found"},
    ]


def test_single_named_sheet(tmp_path) -> None:
    path = write_results([TermRecord()], tmp_path / "terms.xlsx", sheet_name="Terms")
    assert load_workbook(path).sheetnames == ["Terms"]


def test_empty_results_write_header_only(tmp_path) -> None:
    path = write_results([], tmp_path / "empty.xlsx")
    ws = load_workbook(path)["Results"]
    assert [c.value for c in ws[1]] == ["rus", "en", "pl"]
    assert ws.max_row == 1


def test_creates_parent_directories(tmp_path) -> None:
    path = write_results([TermRecord()], tmp_path / "nested" / "dir" / "out.xlsx")
    assert path.exists()
