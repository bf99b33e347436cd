from __future__ import annotations

import pytest

from strato_portfolio.constants import DEFAULT_DECIMALS
from strato_portfolio.processors.decimals import resolve_decimals


@pytest.mark.parametrize(
    "name,expected", [("ETH", 18), ("ETHST", 18), ("STRAT", 4)]
)
def test_overrides_ignore_reported_decimals(name, expected):
    assert resolve_decimals(name, 0) == expected
    assert resolve_decimals(name, 8) == expected
    assert resolve_decimals(name, None) == expected


def test_reported_decimals_used_when_not_overridden():
    assert resolve_decimals("STKN", 18) == 18
    assert resolve_decimals("USDCST", "6") == 6


def test_missing_or_invalid_decimals_fall_back_to_default():
    assert resolve_decimals("STKN", None) == DEFAULT_DECIMALS
    assert resolve_decimals("STKN", "abc") == DEFAULT_DECIMALS
    assert resolve_decimals("STKN", -3) == DEFAULT_DECIMALS
    assert resolve_decimals("STKN", True) == DEFAULT_DECIMALS


def test_custom_override_table():
    assert resolve_decimals("GOLDST", 2, overrides={"GOLDST": 18}) == 18
    assert resolve_decimals("ETH", 6, overrides={}) == 6


@pytest.mark.parametrize("reported", ["²", "٣", "1.5", " ", "1e3"])
def test_non_ascii_or_non_integer_strings_fall_back_to_default(reported):
    assert resolve_decimals("STKN", reported) == DEFAULT_DECIMALS
