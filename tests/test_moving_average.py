import pytest

from analytics.moving_average import calculate_listings_sma, calculate_price_sma


def test_price_sma_emits_one_point_per_full_window(make_records):
    records = make_records([400.0 + i * 10.0 for i in range(30)])

    points = calculate_price_sma(records, 7)

    assert len(points) == 30 - 7 + 1
    assert points[0].index == 6
    assert points[-1].index == 29
    # mean of 400..460 step 10
    assert points[0].value == pytest.approx(430.0)


def test_listings_sma_returns_24_points_for_30_records(make_records):
    records = make_records([400.0] * 30, listings=list(range(100, 130)))

    points = calculate_listings_sma(records, 7)

    assert len(points) == 24
    assert points[0] == (6, pytest.approx(sum(range(100, 107)) / 7))


@pytest.mark.parametrize("period", [7, 10])
def test_insufficient_data_returns_empty(make_records, period):
    records = make_records([400.0] * 5)

    assert calculate_price_sma(records, period) == []
    assert calculate_listings_sma(records, period) == []


def test_price_sma_divides_by_known_values_only(make_records):
    records = make_records([100.0, None, 200.0, None])

    points = calculate_price_sma(records, 2)

    assert points == [(1, 100.0), (2, 200.0), (3, 200.0)]


def test_price_sma_skips_windows_without_prices(make_records):
    records = make_records([100.0, None, None, None, 300.0])

    points = calculate_price_sma(records, 2)

    assert [p.index for p in points] == [1, 4]
    assert len(points) <= len(records) - 2 + 1


def test_listings_sma_always_divides_by_period(make_records):
    records = make_records([None, None, None], listings=[3, 6, 9])

    assert calculate_listings_sma(records, 3) == [(2, 6.0)]


def test_period_of_one_returns_each_value(make_records):
    records = make_records([100.0, 150.0])

    assert calculate_price_sma(records, 1) == [(0, 100.0), (1, 150.0)]


@pytest.mark.parametrize("period", [0, -3, 2.5, True])
def test_rejects_non_positive_period(make_records, period):
    with pytest.raises(ValueError):
        calculate_price_sma(make_records([100.0]), period)
