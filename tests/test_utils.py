"""
test_utils.py - Currency and text helpers
Run with: pytest tests/test_utils.py -v
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils import format_currency, format_currency_input, parse_currency, safe_float, to_title_case


class TestFormatCurrency:

    def test_thousands_and_decimals(self):
        assert format_currency(1234.5) == "1.234,50"

    def test_millions(self):
        assert format_currency(1234567.891) == "1.234.567,89"

    def test_zero(self):
        assert format_currency(0) == "0,00"

    def test_negative_balance(self):
        assert format_currency(-1500) == "-1.500,00"


class TestParseCurrency:

    def test_formatted_text(self):
        assert parse_currency("1.234,56") == pytest.approx(1234.56)

    def test_rightmost_two_digits_are_cents(self):
        assert parse_currency("12") == pytest.approx(0.12)
        assert parse_currency("R$ 10.000,00") == pytest.approx(10000.0)

    @pytest.mark.parametrize("text", ["", None, "abc", "R$ ,"])
    def test_unparseable_is_zero(self, text):
        assert parse_currency(text) == 0.0

    @pytest.mark.parametrize("value", [0.0, 0.01, 0.1, 1.0, 12.34, 999.99, 1234.56, 100000.0, 9876543.21])
    def test_round_trip(self, value):
        assert parse_currency(format_currency(value)) == value

    def test_format_input(self):
        assert format_currency_input("123456") == "1.234,56"


class TestTitleCase:

    def test_connectives_stay_lowercase(self):
        assert to_title_case("CUSTAS DE LIQUIDAÇÃO DA RECLAMADA") == "Custas de Liquidação da Reclamada"

    def test_first_word_is_capitalized_even_if_connective(self):
        assert to_title_case("de ofício") == "De Ofício"

    def test_hyphenated_words(self):
        assert to_title_case("auxílio-doença") == "Auxílio-Doença"

    def test_empty(self):
        assert to_title_case("") == ""
        assert to_title_case(None) == ""


def test_safe_float():
    assert safe_float("1.5") == 1.5
    assert safe_float("x", 2.0) == 2.0
    assert safe_float(None) == 0.0
