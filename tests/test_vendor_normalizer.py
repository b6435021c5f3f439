from __future__ import annotations

import pytest

from spend_tracker.vendors import normalize_vendor


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("POS AMAZON PURCHASE", "AMAZON"),
        ("pos Starbucks #123", "Starbucks #123"),
        ("PURCHASE TARGET 00012", "TARGET 00012"),
        ("DEBIT NETFLIX.COM", "NETFLIX.COM"),
        ("SHELL OIL DEBIT", "SHELL OIL"),
        ("UBER TRIP 01/15/24", "UBER TRIP"),
        ("UBER TRIP 01-15-2024 HELP", "UBER TRIP HELP"),
        ("CARD 1234567890123456 WALMART", "CARD WALMART"),
        ("  WHOLE   FOODS  ", "WHOLE FOODS"),
    ],
)
def test_normalize_vendor(raw, expected):
    assert normalize_vendor(raw) == expected


def test_each_prefix_is_removed_once_in_order():
    # POS, then PURCHASE, then DEBIT; a second POS stays
    assert normalize_vendor("POS PURCHASE DEBIT POS SHOP") == "POS SHOP"


def test_empty_result_falls_back_to_collapsed_input():
    assert normalize_vendor("POS ") == "POS"
    assert normalize_vendor("01/15/2024") == "01/15/2024"


def test_idempotent_on_clean_names():
    once = normalize_vendor("POS AMAZON PURCHASE")
    assert normalize_vendor(once) == once
