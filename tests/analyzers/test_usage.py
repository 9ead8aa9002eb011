"""Tests for the daily model-call budget."""

from datetime import date

from whycomment.analyzers import DailyUsage


def test_consumes_until_limit():
    usage = DailyUsage(2)
    assert usage.try_consume()
    assert usage.try_consume()
    assert not usage.try_consume()
    assert usage.count == 2
    assert usage.remaining == 0


def test_zero_limit_refuses():
    assert not DailyUsage(0).try_consume()


def test_rolls_over_on_new_day():
    days = [date(2024, 3, 1)]
    usage = DailyUsage(1, today=lambda: days[-1])
    assert usage.try_consume()
    assert not usage.try_consume()

    days.append(date(2024, 3, 2))
    assert usage.remaining == 1
    assert usage.try_consume()


def test_reset():
    usage = DailyUsage(1)
    usage.try_consume()
    usage.reset()
    assert usage.count == 0
