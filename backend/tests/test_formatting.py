import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from decimal import Decimal

import pytest

from utils.formatting import format_address, format_balance


class TestFormatAddress:

    @pytest.mark.unit
    def test_truncates(self):
        assert format_address("0x742d35Cc6634C0532925a3b844Bc9e7595f1F6E6") == "0x742d...F6E6"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", None])
    def test_empty(self, value):
        assert format_address(value) == ""


class TestFormatBalance:

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        ("0", "0"),
        (Decimal("0.00005"), "<0.0001"),
        ("1.5", "1.5000"),
        (Decimal("12.345678"), "12.3457"),
        ("not a number", "0"),
    ])
    def test_format(self, value, expected):
        assert format_balance(value) == expected
