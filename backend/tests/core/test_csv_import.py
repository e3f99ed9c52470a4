"""MCQ CSV Import — tests for header matching, row validation and all-or-nothing import.

Tests cover:
    - Headers matched case- and whitespace-insensitively
    - Row errors carry 1-based physical line numbers (header is line 1), even after multi-line cells
    - Blank rows skipped; explanation optional
    - ensure_importable raises CsvImportError for missing columns, bad rows, empty or oversized files
"""

import pytest

from skillsharp.core.csv_import import decode_upload, ensure_importable, parse_mcq_csv
from skillsharp.core.errors import CsvImportError

HEADER = "question,option_a,option_b,option_c,option_d,correct_option,explanation\n"


def test_parses_valid_rows():
    text = HEADER + "What is 2+2?,3,4,5,6,B,Basic sum\n"
    result = parse_mcq_csv(text)
    assert result.ok
    row = result.rows[0]
    assert row.question == "What is 2+2?"
    assert row.correct_option == "b"
    assert row.explanation == "Basic sum"


def test_header_matching_is_loose():
    text = " Question , Option A ,OPTION_B,option_c,option_d,Correct Option\nQ,1,2,3,4,a\n"
    result = parse_mcq_csv(text)
    assert result.ok
    assert result.rows[0].explanation is None


def test_missing_columns_reported():
    result = parse_mcq_csv("question,option_a\nQ,1\n")
    assert "correct_option" in result.missing_columns
    assert not result.ok


def test_empty_file_reports_all_columns_missing():
    result = parse_mcq_csv("")
    assert len(result.missing_columns) == 6


def test_row_errors_have_line_numbers():
    text = HEADER + "Q1,a,b,c,d,a,\n,a,b,c,d,a,\nQ3,a,b,c,d,x,\n"
    result = parse_mcq_csv(text)
    assert len(result.rows) == 1
    assert [e["line"] for e in result.errors] == [3, 4]
    assert "question" in result.errors[0]["message"]


def test_multiline_cell_keeps_physical_line_numbers():
    text = (
        HEADER
        + '"Read the passage:\nline two\nline three",a,b,c,d,a,\n'
        + "Q5,a,b,c,d,z,\n"
        + "\n"
        + ",a,b,c,d,a,\n"
    )
    result = parse_mcq_csv(text)
    assert result.rows[0].question == "Read the passage:\nline two\nline three"
    assert [e["line"] for e in result.errors] == [5, 7]


def test_blank_rows_skipped():
    text = HEADER + "Q1,a,b,c,d,a,\n,,,,,,\n\nQ2,a,b,c,d,2,\n"
    result = parse_mcq_csv(text)
    assert len(result.rows) == 2
    assert result.errors == []


def test_quoted_commas_survive():
    text = HEADER + '"Pick one, please",a,b,c,d,d,\n'
    assert parse_mcq_csv(text).rows[0].question == "Pick one, please"


def test_decode_upload_strips_bom():
    text = decode_upload(("\ufeff" + HEADER).encode("utf-8"))
    assert text.startswith("question")


def test_decode_upload_rejects_non_utf8():
    with pytest.raises(CsvImportError):
        decode_upload(b"\xff\xfe\x00bad")


# ─── ensure_importable ──────────────────────────────────────────

def test_ensure_importable_returns_rows():
    rows = ensure_importable(parse_mcq_csv(HEADER + "Q,a,b,c,d,a,\n"), max_rows=10)
    assert len(rows) == 1


def test_ensure_importable_rejects_any_bad_row():
    result = parse_mcq_csv(HEADER + "Q,a,b,c,d,a,\nQ2,a,b,c,d,z,\n")
    with pytest.raises(CsvImportError) as exc:
        ensure_importable(result, max_rows=10)
    assert exc.value.code == "CSV_INVALID"
    assert exc.value.row_errors[0]["line"] == 3


def test_ensure_importable_rejects_empty():
    with pytest.raises(CsvImportError):
        ensure_importable(parse_mcq_csv(HEADER), max_rows=10)


def test_ensure_importable_enforces_row_limit():
    text = HEADER + "".join(f"Q{i},a,b,c,d,a,\n" for i in range(3))
    with pytest.raises(CsvImportError):
        ensure_importable(parse_mcq_csv(text), max_rows=2)
