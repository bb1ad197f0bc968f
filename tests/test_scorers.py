from datetime import datetime, timedelta, timezone

from trendfeed.ranking import (
    calculate_recency_score,
    calculate_trend_score,
    hours_since,
    round_half_up,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_trend_score_weights_engagement():
    assert calculate_trend_score(10, 5, 2, NOW, now=NOW) == 37


def test_trend_score_floors_at_zero_after_decay():
    published = NOW - timedelta(hours=400)
    assert calculate_trend_score(10, 5, 2, published, now=NOW) == 0


def test_trend_score_decays_a_tenth_per_hour():
    published = NOW - timedelta(hours=20)
    assert calculate_trend_score(10, 5, 2, published, now=NOW) == 35


def test_trend_score_rounds_half_up():
    # 1 like, 15 hours: 2 - 1.5 = 0.5 rounds to 1
    published = NOW - timedelta(hours=15)
    assert calculate_trend_score(1, 0, 0, published, now=NOW) == 1


def test_round_half_up_matches_javascript():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert round_half_up(-1.5) == -1


def test_naive_datetimes_are_utc():
    naive = datetime(2025, 3, 1, 10, 0)
    assert hours_since(naive, now=NOW) == 2


def test_other_timezones_are_converted():
    jst = timezone(timedelta(hours=9))
    published = datetime(2025, 3, 1, 20, 0, tzinfo=jst)  # 11:00 UTC
    assert hours_since(published, now=NOW) == 1


def test_recency_score():
    assert calculate_recency_score(NOW, now=NOW) == 100
    assert calculate_recency_score(NOW - timedelta(hours=10), now=NOW) == 95
    assert calculate_recency_score(NOW - timedelta(hours=3), now=NOW) == 98
    assert calculate_recency_score(NOW - timedelta(hours=500), now=NOW) == 0
