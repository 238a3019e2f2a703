from datetime import date

import pytest

from pacer.errors import InvalidInputError
from pacer.weekday_goals import (
    day_of_week,
    format_weekday_goals,
    normalize_weekday_goals,
    parse_weekday_goals,
    serialize_weekday_goals,
    weekday_preset,
)


def test_day_of_week_counts_from_sunday():
    assert day_of_week(date(2024, 4, 7)) == 0  # Sunday
    assert day_of_week(date(2024, 4, 1)) == 1  # Monday
    assert day_of_week(date(2024, 4, 6)) == 6  # Saturday


def test_normalize_fills_missing_days_with_zero():
    goals = normalize_weekday_goals({"1": 10, 3: 4})
    assert goals == {0: 0, 1: 10, 2: 0, 3: 4, 4: 0, 5: 0, 6: 0}


@pytest.mark.parametrize("goals", [
    {7: 10},
    {-1: 10},
    {"mon": 10},
    {1: -5},
    {1: 2.5},
    {1: "10"},
    {True: 3},
    None,
    [10, 10, 10, 10, 10, 5, 5],
])
def test_normalize_rejects_malformed_maps(goals):
    with pytest.raises(InvalidInputError):
        normalize_weekday_goals(goals)


def test_parse_reads_stored_json():
    assert parse_weekday_goals('{"0": 5, "1": 10, "6": 5}') == {0: 5, 1: 10, 6: 5}


def test_parse_drops_null_days():
    """A null day means 'fall back to the daily goal' for that day"""
    assert parse_weekday_goals('{"0": null, "1": 10}') == {1: 10}


@pytest.mark.parametrize("raw", [None, "", "   ", "not json", "[1, 2, 3]", '{"9": 1}', '{"1": -3}'])
def test_parse_falls_back_to_none(raw):
    assert parse_weekday_goals(raw) is None


def test_serialized_goals_parse_back():
    goals = weekday_preset(10, 5)
    assert parse_weekday_goals(serialize_weekday_goals(goals)) == goals


def test_weekday_preset():
    goals = weekday_preset(10, 5)
    assert goals[0] == goals[6] == 5
    assert all(goals[day] == 10 for day in range(1, 6))
    assert sum(goals.values()) == 60


def test_format_weekday_goals():
    assert format_weekday_goals(None) == "-"
    assert format_weekday_goals({0: 5, 1: 10}) == "Sun 5 Mon 10"
