from __future__ import annotations

import pytest

from spend_tracker.errors import FormatError
from spend_tracker.formats import FORMAT_3, FORMAT_4, detect_format, split_fields

PREAMBLE = ["Account summary", "a,b", "c,d", "e,f", "g,h", "Account activity"]


def test_format3_header_on_first_line():
    lines = ["Status,Date,Description,Debit,Credit", "Cleared,01/05/2024,X,1.00,"]
    assert detect_format(lines) is FORMAT_3


def test_format3_header_order_and_extra_columns_do_not_matter():
    lines = ["Credit,Debit,Memo,Description,Date,Status"]
    assert detect_format(lines) is FORMAT_3


def test_format4_header_after_six_lines():
    lines = [*PREAMBLE, "Date,Description,Amount,Running Bal."]
    assert detect_format(lines) is FORMAT_4


def test_format4_is_tried_before_format3():
    # Line 0 looks like FORMAT_3 but line 6 is a FORMAT_4 header
    lines = [
        "Status,Date,Description,Debit,Credit",
        *PREAMBLE[1:],
        "Date,Description,Amount,Running Bal.",
    ]
    assert detect_format(lines) is FORMAT_4


def test_headers_are_case_sensitive():
    with pytest.raises(FormatError):
        detect_format(["status,date,description,debit,credit"])


def test_unknown_header_lists_supported_layouts():
    with pytest.raises(FormatError) as exc:
        detect_format(["Foo,Bar", "1,2"])
    msg = str(exc.value)
    assert msg.startswith("Unrecognized CSV format.")
    assert "Status, Date, Description, Debit, Credit" in msg
    assert "Date, Description, Amount, Running Bal." in msg


def test_empty_file_is_unrecognized():
    with pytest.raises(FormatError):
        detect_format([])


def test_format_error_is_a_value_error():
    assert issubclass(FormatError, ValueError)


def test_split_fields_trims_and_keeps_quoted_commas():
    assert split_fields(' a , "ACME, INC" ,c ') == ["a", "ACME, INC", "c"]
    assert split_fields("x,,y") == ["x", "", "y"]
