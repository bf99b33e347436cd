import itertools

import pytest

from strato_portfolio.domain import AssetRecord
from strato_portfolio.exceptions import MalformedRecordError
from strato_portfolio.processors.asset_aggregator import group_assets, parse_quantity


def record(name=None, quantity="0", decimals=None, record_id=None):
    return AssetRecord(name=name, id=record_id, quantity=quantity, decimals=decimals)


def test_empty_records():
    """No records should produce no groups."""
    assert group_assets([]) == []


def test_records_with_same_name_are_summed():
    """Quantities are summed exactly, beyond float precision."""
    records = [
        record("STKN", "1000000000000000000000", 18),
        record("STKN", "500000000000000000000", 18),
    ]

    groups = group_assets(records)

    assert len(groups) == 1
    group = groups[0]
    assert group.name == "STKN"
    assert group.total_quantity == 1500000000000000000000
    assert group.token_count == 2
    assert group.decimals == 18
    assert group.members == records


def test_sum_exceeding_float_precision_is_exact():
    records = [record("BIG", str(2**64 + 1)), record("BIG", str(2**64 + 1))]

    groups = group_assets(records)

    assert groups[0].total_quantity == 2**65 + 2


def test_groups_sorted_by_name_case_insensitively():
    records = [record("silver"), record("ETHST"), record("Gold"), record("BTC")]

    names = [group.name for group in group_assets(records)]

    assert names == ["BTC", "ETHST", "Gold", "silver"]


def test_key_falls_back_to_id_then_placeholder():
    records = [
        record(record_id="0xabc", quantity="3"),
        record(name="", record_id="0xabc", quantity="4"),
        record(quantity="5"),
    ]

    groups = {group.name: group for group in group_assets(records)}

    assert groups["0xabc"].total_quantity == 7
    assert groups["0xabc"].token_count == 2
    assert groups["Unnamed Asset"].total_quantity == 5


def test_malformed_quantity_counts_token_but_not_quantity():
    records = [
        record("STKN", "100"),
        record("STKN", "not-a-number"),
        record("STKN", None),
        record("STKN", "-5"),
        record("STKN", "1.5"),
    ]

    group = group_assets(records)[0]

    assert group.total_quantity == 100
    assert group.token_count == 5


def test_decimals_come_from_first_record():
    records = [record("STKN", "1", 6), record("STKN", "1", 18)]

    assert group_assets(records)[0].decimals == 6


def test_decimals_overrides_apply_per_group():
    records = [record("STRAT", "15000", 18), record("ETH", "1", 0)]

    groups = {group.name: group for group in group_assets(records)}

    assert groups["STRAT"].decimals == 4
    assert groups["ETH"].decimals == 18


def test_grouping_is_order_independent():
    records = [
        record("A", "1", 2),
        record("B", "10", 2),
        record("A", "2", 2),
        record("C", "7", 2),
        record("B", "20", 2),
    ]
    expected = [(g.name, g.total_quantity, g.token_count, g.decimals) for g in group_assets(records)]

    for permutation in itertools.permutations(records):
        groups = group_assets(permutation)
        assert [(g.name, g.total_quantity, g.token_count, g.decimals) for g in groups] == expected


def test_token_count_matches_records_per_key():
    records = [record(name) for name in ["X", "Y", "X", "X", "Z", "Y"]]

    counts = {group.name: group.token_count for group in group_assets(records)}

    assert counts == {"X": 3, "Y": 2, "Z": 1}


def test_parse_quantity():
    assert parse_quantity("42") == 42
    assert parse_quantity(" 42 ") == 42
    assert parse_quantity(7) == 7
    for bad in ("", "abc", "-1", "1e3", None, -3, True, 1.5):
        with pytest.raises(MalformedRecordError):
            parse_quantity(bad)


def test_unicode_digit_decimals_fall_back_to_default():
    groups = group_assets([record(name="X", quantity="5", decimals="²")])

    assert groups[0].decimals == 0
    assert groups[0].total_quantity == 5
