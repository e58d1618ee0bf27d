"""
Tests for the CSV tokenizer and table parser.

**Purpose**: Pin down the small CSV grammar the spreadsheet export relies on,
including its known limitations (doubled-quote escaping, unmatched quotes).
"""

from sprint_tracker.data.csv_parser import parse_csv, parse_csv_line


def test_parse_csv_line_quoted_comma():
    assert parse_csv_line('a,"b,c",d') == ["a", "b,c", "d"]


def test_parse_csv_line_empty_middle_field():
    assert parse_csv_line("x,,z") == ["x", "", "z"]


def test_parse_csv_line_trims_fields():
    assert parse_csv_line("  a , b  ,c ") == ["a", "b", "c"]


def test_parse_csv_line_always_emits_final_field():
    assert parse_csv_line("") == [""]
    assert parse_csv_line("a,") == ["a", ""]


def test_parse_csv_line_unmatched_quote_swallows_rest_of_line():
    """An opening quote with no closing quote keeps the remainder as one field."""
    assert parse_csv_line('a,"b,c') == ["a", "b,c"]


def test_parse_csv_line_doubled_quotes_are_not_escapes():
    """
    RFC 4180 '""' escaping is not supported.

    Each quote toggles quoting mode, so the inner quotes disappear instead of
    producing a literal '"'. This test documents the accepted boundary.
    """
    assert parse_csv_line('a,"say ""hi""",b') == ["a", "say hi", "b"]


def test_parse_csv_line_strips_carriage_return():
    assert parse_csv_line("a,b\r") == ["a", "b"]


def test_parse_csv_maps_headers_to_cells():
    rows = parse_csv("id,name\navi,Avi Gupta\nneha,Neha")

    assert rows == [
        {"id": "avi", "name": "Avi Gupta"},
        {"id": "neha", "name": "Neha"},
    ]


def test_parse_csv_empty_input():
    assert parse_csv("") == []
    assert parse_csv("\n  \n") == []


def test_parse_csv_header_only():
    assert parse_csv("id,name\n") == []


def test_parse_csv_skips_blank_lines_and_empty_rows():
    text = "id,name\n\navi,Avi\n,\n   \nneha,Neha\n"

    rows = parse_csv(text)

    assert [row["id"] for row in rows] == ["avi", "neha"]


def test_parse_csv_pads_short_rows_and_ignores_extra_cells():
    rows = parse_csv("id,name,role\navi\nneha,Neha,Dev,extra")

    assert rows[0] == {"id": "avi", "name": "", "role": ""}
    assert rows[1] == {"id": "neha", "name": "Neha", "role": "Dev"}


def test_parse_csv_keeps_header_spelling():
    rows = parse_csv("Start Date,ID\n2025-01-06,T-1")

    assert list(rows[0].keys()) == ["Start Date", "ID"]


def test_parse_csv_windows_line_endings():
    rows = parse_csv("id,name\r\navi,Avi\r\n")

    assert rows == [{"id": "avi", "name": "Avi"}]
