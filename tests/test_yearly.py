from datetime import date
from types import SimpleNamespace

from structlog.testing import capture_logs

from pacer.yearly import aggregate_yearly, yearly_statistics


def log(day, amount, textbook_id=1, log_id=None):
    return SimpleNamespace(id=log_id, date=day, actual_amount=amount, textbook_id=textbook_id)


def test_sums_across_textbooks_per_day():
    logs = [
        log(date(2024, 3, 2), 10, textbook_id=1),
        log(date(2024, 3, 2), 5, textbook_id=2),
        log(date(2024, 1, 15), 7, textbook_id=1),
    ]

    days = aggregate_yearly(2024, logs)

    assert days == {date(2024, 1, 15): 7, date(2024, 3, 2): 15}
    assert list(days) == sorted(days)


def test_other_years_are_left_out():
    logs = [log(date(2023, 12, 31), 9), log(date(2024, 1, 1), 3), log(date(2025, 1, 1), 4)]
    assert aggregate_yearly(2024, logs) == {date(2024, 1, 1): 3}


def test_leap_day_is_counted():
    assert aggregate_yearly(2024, [log(date(2024, 2, 29), 8)]) == {date(2024, 2, 29): 8}


def test_filter_by_textbook():
    logs = [log(date(2024, 5, 1), 10, textbook_id=1), log(date(2024, 5, 1), 5, textbook_id=2)]
    assert aggregate_yearly(2024, logs, textbook_ids={2}) == {date(2024, 5, 1): 5}


def test_unreadable_dates_are_skipped():
    logs = [log("garbage", 10, log_id=99), log("2024-05-01", 4)]

    with capture_logs() as captured:
        days = aggregate_yearly(2024, logs)

    assert days == {date(2024, 5, 1): 4}
    assert captured[0]["event"] == "yearly_log_skipped"
    assert captured[0]["log_id"] == 99


def test_statistics():
    stats = yearly_statistics({date(2024, 1, 1): 10, date(2024, 1, 2): 25, date(2024, 1, 5): 4})

    assert stats.total_amount == 39
    assert stats.study_days == 3
    assert stats.max_day == 25
    assert stats.avg_per_day == 13


def test_statistics_for_an_empty_year():
    stats = yearly_statistics({})
    assert (stats.total_amount, stats.study_days, stats.max_day, stats.avg_per_day) == (0, 0, 0, 0)
